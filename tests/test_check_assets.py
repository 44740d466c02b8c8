import json

import check_assets
from geo_fixtures import collection, line_feature, make_topology, polygon_feature, square


def write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")


def write_assets(public_dir):
    write(public_dir / "lakes.json", collection([polygon_feature("Lake Victoria", [square(32, -2, 2)])]))
    write(public_dir / "rivers.json", collection([line_feature("Nile", [[31, 30], [32, 15]])]))
    countries = [polygon_feature("Egypt", [square(25, 22, 10)])]
    write(public_dir / "countries-110m.json", make_topology({"countries": countries, "land": countries}))
    write(public_dir / "world-marine.json", make_topology({
        "countries": countries,
        "land": countries,
        "marine": [polygon_feature("Red Sea", [square(35, 15, 5)])],
    }))


def test_all_assets_pass(tmp_path):
    write_assets(tmp_path)
    assert check_assets.run_quality_checks(tmp_path)


def test_missing_asset_fails(tmp_path):
    write_assets(tmp_path)
    (tmp_path / "rivers.json").unlink()
    assert not check_assets.run_quality_checks(tmp_path)


def test_feature_collection_issues():
    data = collection([
        polygon_feature("Lake Chad", [[[14, 13], [15, 13], [14, 13]]]),
        polygon_feature("Lake Chad", [square(14, 13)]),
        line_feature("Nile", [[31, 30], [32, 15]]),
    ])
    issues = check_assets.check_feature_collection("lakes.json", data, check_assets.FEATURE_ASSETS["lakes.json"])
    assert any("only 3 positions" in issue for issue in issues)
    assert any("duplicate feature name Lake Chad" in issue for issue in issues)
    assert any("unexpected geometry LineString" in issue for issue in issues)


def test_topology_missing_object():
    topology = make_topology({"countries": [polygon_feature("Egypt", [square(25, 22, 10)])]})
    issues = check_assets.check_topology("world-marine.json", topology, ("countries", "land", "marine"))
    assert issues == ["world-marine.json: missing object 'land'", "world-marine.json: missing object 'marine'"]
