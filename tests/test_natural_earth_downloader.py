import json

import pytest
import requests

import natural_earth_downloader as ned
from geo_fixtures import collection, line_feature


class FakeResponse:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


@pytest.fixture
def no_sleep(monkeypatch):
    sleeps = []
    monkeypatch.setattr(ned.time, "sleep", sleeps.append)
    return sleeps


def scripted_get(monkeypatch, outcomes):
    calls = []

    def fake_get(url, timeout=None):
        calls.append((url, timeout))
        outcome = outcomes[len(calls) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(ned.requests, "get", fake_get)
    return calls


def test_natural_earth_url():
    assert ned.natural_earth_url("ne_10m_lakes").endswith("/geojson/ne_10m_lakes.geojson")


def test_retries_then_succeeds(monkeypatch, no_sleep):
    body = json.dumps(collection([line_feature("Nile", [[30, 0], [31, 30]])]))
    calls = scripted_get(monkeypatch, [
        requests.exceptions.ConnectionError("reset"),
        FakeResponse(status_code=503),
        FakeResponse(body),
    ])

    data = ned.fetch_feature_collection("https://example.test/rivers.geojson", "rivers")

    assert len(data["features"]) == 1
    assert len(calls) == 3
    assert all(timeout == ned.REQUEST_TIMEOUT for _, timeout in calls)
    assert no_sleep == [ned.RETRY_DELAY, ned.RETRY_DELAY]


def test_gives_up_after_max_retries(monkeypatch, no_sleep):
    calls = scripted_get(monkeypatch, [requests.exceptions.Timeout("slow")] * ned.MAX_RETRIES)

    with pytest.raises(requests.exceptions.Timeout):
        ned.fetch_json("https://example.test/x", "x")

    assert len(calls) == ned.MAX_RETRIES
    assert len(no_sleep) == ned.MAX_RETRIES - 1


def test_malformed_json_is_not_retried(monkeypatch, no_sleep):
    calls = scripted_get(monkeypatch, [FakeResponse("{not json"), FakeResponse("{}")])

    with pytest.raises(ValueError, match="Malformed JSON"):
        ned.fetch_json("https://example.test/x", "x")

    assert len(calls) == 1
    assert no_sleep == []


def test_rejects_non_feature_collection(monkeypatch, no_sleep):
    scripted_get(monkeypatch, [FakeResponse(json.dumps({"type": "Topology", "objects": {}}))])
    with pytest.raises(ValueError, match="not a GeoJSON FeatureCollection"):
        ned.fetch_feature_collection("https://example.test/x", "x")


def test_save_json_asset_is_compact_utf8(tmp_path):
    path = tmp_path / "nested" / "lakes.json"
    data = collection([line_feature("Paraná", [[-58.5, -27.3], [-58, -33]])])

    size = ned.save_json_asset(path, data)

    text = path.read_text(encoding="utf-8")
    assert "Paraná" in text
    assert ": " not in text and ", " not in text
    assert size == path.stat().st_size
    assert ned.load_json(path) == data


def test_load_json_malformed(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{", encoding="utf-8")
    with pytest.raises(ValueError):
        ned.load_json(path)
