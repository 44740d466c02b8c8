#!/usr/bin/env python3
"""
============================================
PURPOSE: Correct disputed-territory assignments in countries-110m.json
INPUT: public/countries-110m.json (objects countries + land)
OUTPUT: public/countries-110m.json, rewritten in place
RUN IN: Terminal (python fix_country_borders.py)
============================================

Natural Earth draws Crimea as part of Russia and keeps Northern Cyprus and
Somaliland as separate entities. This script:
1. Moves the Crimea polygon from Russia to Ukraine
2. Merges N. Cyprus into Cyprus
3. Merges Somaliland into Somalia
4. Re-encodes the topology and restores the original ids by country name

Each fix assumes the unfixed input; re-running on an already fixed file
fails on the first entity it cannot find.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Sequence

from entity_relocation import MERGE, MOVE, EntityRelocation, RelocationError, apply_relocations
from natural_earth_downloader import save_json_asset
from topology_tools import build_topology, decode_object, ids_by_name, load_topology, preserve_ids

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
COUNTRIES_FILE = "countries-110m.json"

QUANTIZATION = 100_000

# (lon_min, lat_min, lon_max, lat_max); Crimea is polygon #11 of Russia at 110m
CRIMEA_BBOX = (32.0, 44.0, 37.0, 46.5)

RELOCATIONS = (
    EntityRelocation(MOVE, source="Russia", target="Ukraine", bbox=CRIMEA_BBOX),
    EntityRelocation(MERGE, source="N. Cyprus", target="Cyprus"),
    EntityRelocation(MERGE, source="Somaliland", target="Somalia"),
)


def fix_topology(topology: Dict, relocations: Sequence[EntityRelocation] = RELOCATIONS) -> Dict:
    """Apply the relocations to the countries object and rebuild the topology."""
    countries = decode_object(topology, "countries")
    land = decode_object(topology, "land")
    logger.info(f"  Countries: {len(countries['features'])}")

    countries = apply_relocations(countries, relocations)

    logger.info("Converting back to TopoJSON...")
    fixed = build_topology({"countries": countries, "land": land}, QUANTIZATION)
    restored = preserve_ids(fixed, ids_by_name(topology, "countries"), "countries")
    logger.info(f"  Ids preserved: {restored}/{len(countries['features'])}")
    return fixed


def main(input_path: Optional[Path] = None, output_path: Optional[Path] = None) -> int:
    input_path = input_path or PUBLIC_DIR / COUNTRIES_FILE
    output_path = output_path or input_path

    try:
        logger.info(f"Reading TopoJSON from: {input_path}")
        topology = load_topology(input_path)
        fixed = fix_topology(topology)
        size = save_json_asset(output_path, fixed)
    except (RelocationError, KeyError, ValueError, OSError) as e:
        logger.error(f"✗ Country fix failed: {e}")
        return 1

    logger.info(f"✓ Written: {output_path}")
    logger.info(f"  Size: {size / 1024:.0f} KB")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
