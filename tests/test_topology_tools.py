import json

import pytest
from shapely.geometry import shape

from geo_fixtures import collection, make_topology, multipolygon_feature, polygon_feature, square
from topology_tools import (
    build_topology,
    decode_object,
    geometry_counts,
    ids_by_name,
    load_topology,
    object_names,
    preserve_ids,
)


def test_decode_quantized_topology_keeps_source_ids():
    topology = {
        "type": "Topology",
        "transform": {"scale": [0.5, 0.5], "translate": [10, 20]},
        "arcs": [[[0, 0], [2, 0], [0, 2], [-2, 0], [0, -2]], [[4, 4], [2, 0], [0, 2], [-2, 0], [0, -2]]],
        "objects": {
            "shapes": {
                "type": "GeometryCollection",
                "geometries": [
                    {"type": "Polygon", "arcs": [[0]], "id": "001", "properties": {"name": "Box"}},
                    {"type": "Polygon", "arcs": [[1]], "properties": {"name": "Other"}},
                ],
            }
        },
    }
    box, other = decode_object(topology, "shapes")["features"]

    assert box["id"] == "001"
    assert box["properties"] == {"name": "Box"}
    assert shape(box["geometry"]).bounds == (10, 20, 11, 21)
    assert shape(other["geometry"]).bounds == (12, 22, 13, 23)
    assert "id" not in other


def test_decode_null_geometry():
    topology = make_topology({"c": [polygon_feature("A", [square(0, 0)])]})
    topology["objects"]["c"]["geometries"].append({"type": None, "properties": {"name": "X"}})

    features = decode_object(topology, "c")["features"]
    assert [f["properties"]["name"] for f in features] == ["A", "X"]
    assert features[1]["geometry"] is None


def test_decode_single_geometry_object():
    topology = make_topology({"c": [polygon_feature("A", [square(0, 0)])]})
    topology["objects"]["c"] = topology["objects"]["c"]["geometries"][0]

    features = decode_object(topology, "c")["features"]
    assert len(features) == 1
    assert features[0]["properties"] == {"name": "A"}
    assert shape(features[0]["geometry"]).area == pytest.approx(1.0)


def test_missing_object_raises_key_error():
    topology = make_topology({"countries": [polygon_feature("A", [square(0, 0)])]})
    with pytest.raises(KeyError):
        decode_object(topology, "marine")


def test_load_topology_rejects_geojson(tmp_path):
    path = tmp_path / "not-topo.json"
    path.write_text(json.dumps(collection([])), encoding="utf-8")
    with pytest.raises(ValueError):
        load_topology(path)


def test_object_names_and_counts():
    topology = make_topology({
        "countries": [polygon_feature("A", [square(0, 0)]), polygon_feature("B", [square(5, 5)])],
        "land": [multipolygon_feature("land", [[square(0, 0)], [square(5, 5)]])],
    })
    assert object_names(topology) == ["countries", "land"]
    assert geometry_counts(topology) == {"countries": 2, "land": 1}


def test_preserve_ids_drops_generated_ids():
    original = make_topology({
        "countries": [
            polygon_feature("France", [square(0, 40)]),
            polygon_feature("Spain", [square(-5, 38)]),
        ]
    })
    original["objects"]["countries"]["geometries"][0]["id"] = "250"
    original["objects"]["countries"]["geometries"][1]["id"] = "724"
    ids = ids_by_name(original, "countries")
    assert ids == {"France": "250", "Spain": "724"}

    rebuilt = make_topology({
        "countries": [
            polygon_feature("Spain", [square(-5, 38)]),
            polygon_feature("Atlantis", [square(-30, 30)]),
            polygon_feature("France", [square(0, 40)]),
        ],
        "land": [multipolygon_feature("land", [[square(-5, 38)], [square(0, 40)]])],
    })
    for obj in rebuilt["objects"].values():
        for i, geom in enumerate(obj["geometries"]):
            geom["id"] = i

    assert preserve_ids(rebuilt, ids, "countries") == 2
    geoms = rebuilt["objects"]["countries"]["geometries"]
    assert [g.get("id") for g in geoms] == ["724", None, "250"]
    assert "id" not in geoms[1]
    assert "id" not in rebuilt["objects"]["land"]["geometries"][0]


def test_build_topology_round_trip():
    countries = collection([
        polygon_feature("A", [square(0, 0)]),
        multipolygon_feature("B", [[square(3, 0)], [square(6, 0)]]),
    ])
    land = collection([multipolygon_feature("land", [[square(0, 0)], [square(3, 0)], [square(6, 0)]])])

    topology = build_topology({"countries": countries, "land": land}, 100_000)
    assert topology["type"] == "Topology"
    assert set(object_names(topology)) == {"countries", "land"}

    decoded = {f["properties"]["name"]: f for f in decode_object(topology, "countries")["features"]}
    assert set(decoded) == {"A", "B"}
    assert shape(decoded["A"]["geometry"]).area == pytest.approx(1.0, abs=1e-3)
    assert shape(decoded["B"]["geometry"]).area == pytest.approx(2.0, abs=1e-3)
    assert shape(decoded["B"]["geometry"]).bounds == pytest.approx((3, 0, 7, 1), abs=1e-3)


def test_build_topology_rejects_empty_layer():
    with pytest.raises(ValueError):
        build_topology({"marine": collection([])}, 10_000)


def arc_refs(arcs):
    """Flatten a geometry's nested arc references."""
    if isinstance(arcs, int):
        return [arcs]
    return [ref for part in arcs for ref in arc_refs(part)]


def test_neighbours_share_one_arc_pool():
    countries = collection([
        polygon_feature("A", [square(0, 0)]),
        polygon_feature("B", [square(1, 0)]),
    ])
    land = collection([polygon_feature("land", [[[0, 0], [1, 0], [2, 0], [2, 1], [1, 1], [0, 1], [0, 0]]])])

    topology = build_topology({"countries": countries, "land": land}, 100_000)

    refs = {g["properties"]["name"]: arc_refs(g["arcs"]) for g in topology["objects"]["countries"]["geometries"]}
    land_refs = arc_refs(topology["objects"]["land"]["geometries"][0]["arcs"])

    def index(ref):
        return ref if ref >= 0 else ~ref

    a = {index(r) for r in refs["A"]}
    b = {index(r) for r in refs["B"]}
    shared = a & b
    assert len(shared) == 1
    (edge,) = shared

    # one side walks the shared edge forwards, the other backwards
    directions = {r >= 0 for r in refs["A"] + refs["B"] if index(r) == edge}
    assert directions == {True, False}

    assert {index(r) for r in land_refs} == (a | b) - shared
    assert len(topology["arcs"]) == len(a | b)


def test_rebuilt_layers_carry_no_generated_ids():
    countries = collection([polygon_feature("A", [square(0, 0)]), polygon_feature("B", [square(3, 0)])])
    land = collection([multipolygon_feature("land", [[square(0, 0)], [square(3, 0)]])])

    topology = build_topology({"countries": countries, "land": land}, 100_000)
    preserve_ids(topology, {"B": "002"}, "countries")

    ids = {g["properties"]["name"]: g.get("id") for g in topology["objects"]["countries"]["geometries"]}
    assert ids == {"A": None, "B": "002"}
    assert all("id" not in g for g in topology["objects"]["land"]["geometries"])
