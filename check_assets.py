#!/usr/bin/env python3
"""
Quality checks on the built map assets.

Run after the build scripts:
- every expected asset exists, parses, and its size is reported
- lakes/rivers features carry unique names and the right geometry family
- every polygon ring is closed with at least 4 positions
- topologies carry the objects the frontend reads
- invalid polygon geometries are reported as warnings
"""

import argparse
import logging
from pathlib import Path
from typing import Dict, List

from shapely.errors import ShapelyError
from shapely.geometry import shape

from geometry_tools import LINE_TYPES, POLYGON_TYPES, polygons_of
from natural_earth_downloader import load_json
from topology_tools import decode_object

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ============================================
# CONFIGURATION
# ============================================

PUBLIC_DIR = Path(__file__).resolve().parent / "public"

# asset -> allowed geometry types
FEATURE_ASSETS = {
    "lakes.json": POLYGON_TYPES,
    "rivers.json": LINE_TYPES,
}

# asset -> required objects
TOPOLOGY_ASSETS = {
    "world-marine.json": ("countries", "land", "marine"),
    "countries-110m.json": ("countries", "land"),
}


def ring_issues(label: str, geometry: Dict) -> List[str]:
    issues = []
    for p, polygon in enumerate(polygons_of(geometry)):
        for r, ring in enumerate(polygon):
            if len(ring) < 4:
                issues.append(f"{label}: polygon {p} ring {r} has only {len(ring)} positions")
            elif ring[0][0] != ring[-1][0] or ring[0][1] != ring[-1][1]:
                issues.append(f"{label}: polygon {p} ring {r} is not closed")
    return issues


def check_validity(label: str, geometry: Dict) -> None:
    try:
        geom = shape(geometry)
    except (ValueError, TypeError, ShapelyError) as e:
        logger.warning(f"  {label}: could not build geometry: {e}")
        return
    if not geom.is_valid:
        logger.warning(f"  {label}: geometry is not valid (self-intersection or similar)")


def check_feature_collection(name: str, data: Dict, allowed_types) -> List[str]:
    issues = []
    if data.get("type") != "FeatureCollection" or not isinstance(data.get("features"), list):
        return [f"{name}: not a FeatureCollection"]

    seen = set()
    for i, feature in enumerate(data["features"]):
        feature_name = (feature.get("properties") or {}).get("name")
        label = f"{name}[{feature_name or i}]"
        if not feature_name:
            issues.append(f"{name}: feature {i} has no name")
        elif feature_name in seen:
            issues.append(f"{name}: duplicate feature name {feature_name}")
        seen.add(feature_name)

        geometry = feature.get("geometry")
        if not geometry or geometry.get("type") not in allowed_types:
            issues.append(f"{label}: unexpected geometry {geometry and geometry.get('type')}")
            continue
        if geometry["type"] in POLYGON_TYPES:
            issues.extend(ring_issues(label, geometry))
            check_validity(label, geometry)

    logger.info(f"    Features: {len(data['features'])}")
    return issues


def check_topology(name: str, data: Dict, required) -> List[str]:
    if data.get("type") != "Topology":
        return [f"{name}: not a Topology"]
    objects = data.get("objects") or {}
    issues = [f"{name}: missing object '{obj}'" for obj in required if obj not in objects]

    if "marine" in objects:
        for i, feature in enumerate(decode_object(data, "marine")["features"]):
            if not feature["properties"].get("name"):
                issues.append(f"{name}: marine geometry {i} has no name")

    for obj in required:
        if obj in objects:
            logger.info(f"    {obj}: {len(objects[obj].get('geometries', []))} geometries")
    return issues


def run_quality_checks(public_dir: Path = PUBLIC_DIR) -> bool:
    """Run all checks; True when no issues were found."""
    logger.info(f"\n{'='*60}")
    logger.info("RUNNING QUALITY CHECKS")
    logger.info(f"{'='*60}")

    issues = []
    expected = list(FEATURE_ASSETS.items()) + list(TOPOLOGY_ASSETS.items())

    for asset, rule in expected:
        path = public_dir / asset
        if not path.exists():
            issues.append(f"{asset}: Missing")
            continue

        size_kb = path.stat().st_size / 1024
        logger.info(f"  {asset}: {size_kb:.1f} KB")
        try:
            data = load_json(path)
        except ValueError as e:
            issues.append(f"{asset}: Invalid JSON - {e}")
            continue

        if asset in FEATURE_ASSETS:
            issues.extend(check_feature_collection(asset, data, rule))
        else:
            issues.extend(check_topology(asset, data, rule))

    if issues:
        logger.error(f"\nIssues found ({len(issues)}):")
        for issue in issues:
            logger.error(f"  {issue}")
    else:
        logger.info("\nNo critical issues found!")

    return len(issues) == 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Check built map assets")
    parser.add_argument("--public-dir", type=Path, default=PUBLIC_DIR, help="Folder holding the assets")
    args = parser.parse_args()
    return 0 if run_quality_checks(args.public_dir) else 1


if __name__ == "__main__":
    raise SystemExit(main())
