"""Small hand-built GeoJSON and TopoJSON inputs for the tests."""


def square(x, y, size=1.0):
    return [[x, y], [x + size, y], [x + size, y + size], [x, y + size], [x, y]]


def feature(properties, geometry, feature_id=None):
    f = {"type": "Feature", "properties": properties, "geometry": geometry}
    if feature_id is not None:
        f["id"] = feature_id
    return f


def line_feature(name, coords, **props):
    props["name"] = name
    return feature(props, {"type": "LineString", "coordinates": coords})


def polygon_feature(name, polygon, **props):
    props["name"] = name
    return feature(props, {"type": "Polygon", "coordinates": polygon})


def multipolygon_feature(name, polygons, **props):
    props["name"] = name
    return feature(props, {"type": "MultiPolygon", "coordinates": polygons})


def collection(features):
    return {"type": "FeatureCollection", "features": features}


def make_topology(objects):
    """
    Unquantized Topology from {object_name: [feature, ...]}.

    Every ring becomes its own arc; nothing is shared, which is enough for
    decoding and re-encoding tests.
    """
    arcs = []

    def ring_arcs(ring):
        arcs.append([list(p) for p in ring])
        return [len(arcs) - 1]

    topo_objects = {}
    for object_name, features in objects.items():
        geometries = []
        for f in features:
            geometry = f["geometry"]
            if geometry["type"] == "Polygon":
                geom = {"type": "Polygon", "arcs": [ring_arcs(r) for r in geometry["coordinates"]]}
            else:
                geom = {
                    "type": "MultiPolygon",
                    "arcs": [[ring_arcs(r) for r in polygon] for polygon in geometry["coordinates"]],
                }
            if f.get("properties"):
                geom["properties"] = dict(f["properties"])
            if f.get("id") is not None:
                geom["id"] = f["id"]
            geometries.append(geom)
        topo_objects[object_name] = {"type": "GeometryCollection", "geometries": geometries}

    return {"type": "Topology", "objects": topo_objects, "arcs": arcs}
