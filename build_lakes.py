#!/usr/bin/env python3
"""
============================================
PURPOSE: Build lakes.json from Natural Earth 10m lakes
INPUT: ne_10m_lakes GeoJSON (HTTPS)
OUTPUT: public/lakes.json - one Polygon/MultiPolygon per game lake
RUN IN: Terminal (python build_lakes.py)
============================================

1. Fetches ne_10m_lakes from the Natural Earth GitHub mirror
2. Filters to the named lakes used in the game
3. Merges multi-part lakes (e.g. Aral Sea = North + South)
4. Simplifies rings using Douglas-Peucker, keeping them closed
5. Writes public/lakes.json
"""

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import requests

from feature_matcher import FeatureMatcher
from geometry_tools import dedupe_polygons, extract_polygons, feature_collection, named_feature, polygons_to_geometry
from natural_earth_downloader import fetch_feature_collection, natural_earth_url, save_json_asset
from simplification import simplify_geometry

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ============================================
# CONFIGURATION
# ============================================

PUBLIC_DIR = Path(__file__).resolve().parent / "public"
OUTPUT_FILE = "lakes.json"

NE_URL = natural_earth_url("ne_10m_lakes")

SIMPLIFY_TOLERANCE = 0.04

# Lake table uses full NE names, matched exactly against the "name" field
NAME_FIELDS = ("name",)

# Game lake name -> NE names to merge
LAKE_MAP: Dict[str, Tuple[str, ...]] = {
    "Lake Victoria":    ("Lake Victoria",),
    "Lake Baikal":      ("Lake Baikal",),
    "Lake Titicaca":    ("Lago Titicaca",),
    "Lake Superior":    ("Lake Superior",),
    "Dead Sea":         ("Dead Sea",),
    "Great Salt Lake":  ("Great Salt Lake",),
    "Lake Tanganyika":  ("Lake Tanganyika",),
    "Lake Chad":        ("Lake Chad",),
    "Aral Sea":         ("North Aral Sea", "South Aral Sea"),
    "Lake Michigan":    ("Lake Michigan",),
    "Lake Malawi":      ("Lake Malawi",),
    "Lake Turkana":     ("Lake Turkana",),
    "Lake Ladoga":      ("Lake Ladoga",),
    "Lake Huron":       ("Lake Huron",),
    "Lake Erie":        ("Lake Erie",),
    "Lake Ontario":     ("Lake Ontario",),
    "Lake Winnipeg":    ("Lake Winnipeg",),
    "Lake Volta":       ("Lake Volta",),
}


# ============================================
# BUILD
# ============================================

def build_lake_features(
    source_features: Sequence[Dict],
    lake_map: Mapping[str, Sequence[str]] = LAKE_MAP,
    tolerance: float = SIMPLIFY_TOLERANCE,
) -> Tuple[List[Dict], List[str]]:
    """Return the lake features in lake_map order and the names that matched nothing."""
    matcher = FeatureMatcher(source_features, name_fields=NAME_FIELDS, exact=True)

    output_features = []
    missing = []

    for game_name, patterns in lake_map.items():
        polygons = []
        for feature in matcher.match(game_name, patterns):
            polygons.extend(extract_polygons(feature.get("geometry")))
        polygons = dedupe_polygons(polygons)

        if not polygons:
            missing.append(game_name)
            continue

        geometry = simplify_geometry(polygons_to_geometry(polygons), tolerance)
        output_features.append(named_feature(game_name, geometry))

    return output_features, missing


def main(output_path: Optional[Path] = None, url: str = NE_URL) -> int:
    output_path = output_path or PUBLIC_DIR / OUTPUT_FILE

    try:
        logger.info("Step 1: Fetching Natural Earth 10m lakes...")
        source = fetch_feature_collection(url, "lakes")

        logger.info("Step 2: Matching lakes...")
        features, missing = build_lake_features(source["features"])

        logger.info(f"  Matched lakes: {len(features)}/{len(LAKE_MAP)}")
        if missing:
            logger.warning(f"  ⚠ Missing: {', '.join(missing)}")

        logger.info("Step 3: Writing output...")
        size = save_json_asset(output_path, feature_collection(features))
    except (requests.exceptions.RequestException, ValueError, OSError) as e:
        logger.error(f"✗ Lakes build failed: {e}")
        return 1

    logger.info(f"✓ Written: {output_path}")
    logger.info(f"  Features: {len(features)}")
    logger.info(f"  Size: {size / 1024:.0f} KB")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
