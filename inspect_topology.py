#!/usr/bin/env python3
"""
Print the structure of a TopoJSON file and the sub-polygons of named entities.

Used to find the bounding box for a new relocation in fix_country_borders.py:

    python inspect_topology.py public/countries-110m.json Russia Ukraine
"""

import argparse
import logging
from pathlib import Path

from entity_relocation import polygon_bbox
from geometry_tools import polygons_of
from topology_tools import decode_object, geometry_counts, load_topology

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DEFAULT_PATH = Path(__file__).resolve().parent / "public" / "countries-110m.json"


def describe_entity(topology: dict, object_name: str, entity: str) -> bool:
    collection = decode_object(topology, object_name)
    raw = {
        (g.get("properties") or {}).get("name"): g
        for g in topology["objects"][object_name].get("geometries", [])
    }
    for feature in collection["features"]:
        if feature["properties"].get("name") != entity:
            continue
        geometry = feature["geometry"]
        logger.info(f"{entity}:")
        logger.info(f"  ID: {raw.get(entity, {}).get('id')}")
        logger.info(f"  Type: {geometry['type'] if geometry else None}")
        if geometry and geometry["type"] in ("Polygon", "MultiPolygon"):
            polygons = polygons_of(geometry)
            logger.info(f"  Polygons: {len(polygons)}")
            for i, polygon in enumerate(polygons):
                lon_min, lat_min, lon_max, lat_max = polygon_bbox(polygon)
                logger.info(
                    f"    #{i}: lon {lon_min:.2f}..{lon_max:.2f}, lat {lat_min:.2f}..{lat_max:.2f}"
                    f" ({len(polygon[0])} points)"
                )
        return True
    logger.warning(f"Entity not found: {entity}")
    return False


def main() -> int:
    parser = argparse.ArgumentParser(description="Inspect a TopoJSON file")
    parser.add_argument("path", nargs="?", type=Path, default=DEFAULT_PATH, help="TopoJSON file")
    parser.add_argument("entities", nargs="*", help="Entity names to describe")
    parser.add_argument("--object", default="countries", help="Object holding the entities")
    args = parser.parse_args()

    try:
        topology = load_topology(args.path)
    except (ValueError, OSError) as e:
        logger.error(f"✗ {e}")
        return 1

    logger.info("TopoJSON structure:")
    logger.info(f"- Type: {topology['type']}")
    for name, count in geometry_counts(topology).items():
        logger.info(f"- Object {name}: {count} geometries")
    logger.info(f"- Number of arcs: {len(topology.get('arcs', []))}")
    if "transform" in topology:
        logger.info(f"- Transform scale: {topology['transform']['scale']}")

    found = True
    for entity in args.entities:
        try:
            found = describe_entity(topology, args.object, entity) and found
        except KeyError as e:
            logger.error(f"✗ {e}")
            return 1
    return 0 if found else 1


if __name__ == "__main__":
    raise SystemExit(main())
