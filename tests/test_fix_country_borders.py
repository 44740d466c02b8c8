import json

import pytest
from shapely.geometry import shape

import fix_country_borders as fcb
from geo_fixtures import make_topology, multipolygon_feature, polygon_feature, square
from topology_tools import decode_object


def country(name, feature_id, polygons):
    f = multipolygon_feature(name, polygons) if len(polygons) > 1 else polygon_feature(name, polygons[0])
    f["id"] = feature_id
    return f


def unfixed_topology():
    countries = [
        country("Russia", "643", [[square(40, 50, 5)], [square(33, 44.5, 1.5)]]),
        country("Ukraine", "804", [[square(24, 46.8, 6)]]),
        country("Cyprus", "196", [[square(32.3, 34.6, 0.5)]]),
        country("N. Cyprus", "-99", [[square(33, 35.2, 0.5)]]),
        country("Somalia", "706", [[square(42, -1, 4)]]),
        country("Somaliland", "-99", [[square(43, 8, 3)]]),
    ]
    land = [multipolygon_feature(None, [[square(40, 50, 5)], [square(24, 46.8, 6)]])]
    return make_topology({"countries": countries, "land": land})


def by_name(topology):
    return {f["properties"]["name"]: f for f in decode_object(topology, "countries")["features"]}


def test_fix_topology():
    fixed = fcb.fix_topology(unfixed_topology())
    countries = by_name(fixed)

    assert set(countries) == {"Russia", "Ukraine", "Cyprus", "Somalia"}
    assert shape(countries["Russia"]["geometry"]).bounds == pytest.approx((40, 50, 45, 55), abs=1e-3)
    assert len(countries["Ukraine"]["geometry"]["coordinates"]) == 2
    assert shape(countries["Cyprus"]["geometry"]).area == pytest.approx(0.5, abs=1e-3)
    assert shape(countries["Somalia"]["geometry"]).area == pytest.approx(25, abs=1e-2)

    ids = {g["properties"]["name"]: g.get("id") for g in fixed["objects"]["countries"]["geometries"]}
    assert ids["Ukraine"] == "804"
    assert ids["Cyprus"] == "196"
    assert "land" in fixed["objects"]


def test_main_rewrites_in_place(tmp_path):
    path = tmp_path / fcb.COUNTRIES_FILE
    path.write_text(json.dumps(unfixed_topology()), encoding="utf-8")

    assert fcb.main(input_path=path) == 0
    assert "N. Cyprus" not in by_name(json.loads(path.read_text(encoding="utf-8")))


def test_main_on_fixed_input_fails_and_leaves_file(tmp_path):
    path = tmp_path / fcb.COUNTRIES_FILE
    path.write_text(json.dumps(unfixed_topology()), encoding="utf-8")
    assert fcb.main(input_path=path) == 0
    before = path.read_text(encoding="utf-8")

    assert fcb.main(input_path=path) == 1
    assert path.read_text(encoding="utf-8") == before
