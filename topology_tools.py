"""
TopoJSON helpers: decode named objects back to GeoJSON, encode several
GeoJSON layers into one shared-arc topology, and carry entity ids across a
rebuild.

Encoding goes through the topojson package, fed one GeoDataFrame per
layer. Decoding reads a topology back through the same package and
restores the source geometry ids.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import geopandas as gpd
import topojson as tp

from natural_earth_downloader import load_json

logger = logging.getLogger(__name__)


def load_topology(path: Path) -> Dict:
    """Read a TopoJSON file, failing on anything that is not a Topology."""
    data = load_json(path)
    if not isinstance(data, dict) or data.get("type") != "Topology":
        raise ValueError(f"Not a TopoJSON Topology: {path}")
    if not isinstance(data.get("objects"), dict):
        raise ValueError(f"Topology has no objects: {path}")
    return data


def object_names(topology: Dict) -> List[str]:
    return list(topology.get("objects", {}))


# ============================================
# DECODING
# ============================================

def decode_object(topology: Dict, name: str) -> Dict:
    """
    GeoJSON FeatureCollection for topology.objects[name].

    A GeometryCollection object yields one feature per member geometry; any
    other object is wrapped as a single-feature collection. Features keep the
    id of their source geometry and carry none when it had none.
    """
    objects = topology.get("objects", {})
    if name not in objects:
        raise KeyError(f"Topology has no object '{name}' (objects: {', '.join(objects) or 'none'})")

    obj = objects[name]
    if obj.get("type") != "GeometryCollection":
        obj = {"type": "GeometryCollection", "geometries": [obj]}
        topology = {**topology, "objects": {**objects, name: obj}}

    decoded = tp.Topology(topology, topology=True, prequantize=False, object_name=list(topology["objects"]))
    collection = json.loads(decoded.to_geojson(object_name=name))

    # the serializer numbers features without an id by position
    for feature, geom in zip(collection["features"], obj.get("geometries", [])):
        feature.pop("id", None)
        if geom.get("id") is not None:
            feature["id"] = geom["id"]
        feature["properties"] = dict(feature.get("properties") or {})
    return collection


# ============================================
# ENCODING
# ============================================

def collection_to_frame(collection: Dict, layer: str) -> gpd.GeoDataFrame:
    features = [
        {
            "type": "Feature",
            "properties": dict(f.get("properties") or {}),
            "geometry": f.get("geometry"),
        }
        for f in collection.get("features", [])
    ]
    if not features:
        raise ValueError(f"Layer '{layer}' has no features to encode")
    return gpd.GeoDataFrame.from_features(features)


def build_topology(layers: Dict[str, Dict], quantization: int) -> Dict:
    """
    Encode named FeatureCollections into a single Topology sharing one arc pool.

    quantization is the prequantization factor handed to topojson: a larger
    value keeps more coordinate precision, a smaller one snaps more positions
    together and gives a smaller file.
    """
    names = list(layers)
    frames = [collection_to_frame(layers[name], name) for name in names]
    logger.info(f"Building topology for {', '.join(names)} (quantization {quantization:g})")
    topology = tp.Topology(frames, object_name=names, prequantize=quantization)
    return topology.to_dict()


# ============================================
# IDENTITY PRESERVATION
# ============================================

def ids_by_name(topology: Dict, object_name: str) -> Dict[str, Any]:
    """name -> id for every geometry of an object that has both."""
    ids = {}
    for geom in topology.get("objects", {}).get(object_name, {}).get("geometries", []):
        name = (geom.get("properties") or {}).get("name")
        if name and geom.get("id") is not None:
            ids[name] = geom["id"]
    return ids


def preserve_ids(new_topology: Dict, original_ids: Dict[str, Any], object_name: str) -> int:
    """
    Stamp original ids onto the rebuilt object's geometries, matched by name.

    Ids the encoder generated on its own are dropped from every object so each
    id left in the output is one external code may already be keyed on.
    Returns how many geometries received an id.
    """
    for obj in new_topology["objects"].values():
        obj.pop("id", None)
        for geom in obj.get("geometries", []):
            geom.pop("id", None)

    restored = 0
    for geom in new_topology["objects"][object_name].get("geometries", []):
        name = (geom.get("properties") or {}).get("name")
        if name in original_ids:
            geom["id"] = original_ids[name]
            restored += 1
    return restored


def geometry_counts(topology: Dict) -> Dict[str, int]:
    counts = {}
    for name, obj in topology.get("objects", {}).items():
        counts[name] = len(obj.get("geometries", [])) if obj.get("type") == "GeometryCollection" else 1
    return counts
