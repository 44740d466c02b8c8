#!/usr/bin/env python3
"""
============================================
PURPOSE: Merge countries + marine polygons into one shared-arc TopoJSON
INPUT: public/countries-50m.json, public/FinalMarine50m.json,
       public/FinalMarine10m.json
OUTPUT: public/world-marine.json with objects countries, land, marine
RUN IN: Terminal (python merge_marine_countries.py)
============================================

Strategy:
1. countries-50m.json supplies detailed country and land shapes
2. FinalMarine50m is the base marine data (smaller, smoother)
3. FinalMarine10m fills in names that only exist at 10m
4. Marine features are filtered to the names the game uses and their
   property names normalised (moje_nazvy -> name)
5. Everything is encoded into a single compact topology
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from geometry_tools import feature_collection, named_feature
from natural_earth_downloader import save_json_asset
from topology_tools import (
    build_topology,
    decode_object,
    geometry_counts,
    ids_by_name,
    load_topology,
    object_names,
    preserve_ids,
)

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
COUNTRIES_FILE = "countries-50m.json"
MARINE_50M_FILE = "FinalMarine50m.json"
MARINE_10M_FILE = "FinalMarine10m.json"
OUTPUT_FILE = "world-marine.json"

# 1e4 keeps good precision while compressing
QUANTIZATION = 10_000

MARINE_NAME_FIELD = "moje_nazvy"

# Marine files spell a few names in capitals
NAME_NORMALIZE = {
    "INDIAN OCEAN": "Indian Ocean",
    "SOUTHERN OCEAN": "Southern Ocean",
}

# Water bodies the game draws as polygons (straits and canals use ellipses)
GAME_WATER_NAMES = frozenset({
    # Oceans
    "Pacific Ocean", "Atlantic Ocean", "Indian Ocean", "Arctic Ocean", "Southern Ocean",
    # Seas
    "Mediterranean Sea", "Red Sea", "Black Sea", "Caspian Sea", "Arabian Sea",
    "Caribbean Sea", "South China Sea", "Baltic Sea", "North Sea", "Sea of Japan",
    "Coral Sea", "Tasman Sea", "Adriatic Sea", "Aegean Sea", "Andaman Sea",
    "Barents Sea", "Beaufort Sea", "Bering Sea", "East China Sea", "Greenland Sea",
    "Ionian Sea", "Irish Sea", "Labrador Sea", "Norwegian Sea", "Philippine Sea",
    "Ross Sea", "Sargasso Sea", "Sea of Okhotsk", "Tyrrhenian Sea", "Weddell Sea",
    "Yellow Sea", "Amundsen Sea", "Arafura Sea", "Balearic Sea", "Banda Sea",
    "Bellingshausen Sea", "Bismarck Sea", "Bo Hai", "Celebes Sea", "Ceram Sea",
    "Chukchi Sea", "Great Barrier Reef", "Inner Sea", "Inner Seas", "Java Sea",
    "Kara Sea", "Laccadive Sea", "Laptev Sea", "Molucca Sea", "Scotia Sea",
    "Solomon Sea", "Sulu Sea", "Timor Sea", "White Sea",
    # 10m-only seas
    "Sea of Azov", "Sea of Crete", "Sea of Marmara", "Alboran Sea", "Ligurian Sea",
    "Flores Sea", "Bali Sea", "Savu Sea", "Halmahera Sea", "Samar Sea",
    "Sibuyan Sea", "Visayan Sea", "Bohol Sea", "East Siberian Sea", "Lincoln Sea",
    "Davis Sea", "Salish Sea", "Kattegat", "Skagerrak",
    # Gulfs
    "Gulf of Mexico", "Bay of Bengal", "Persian Gulf", "Gulf of Aden", "Hudson Bay",
    "Gulf of Alaska", "Gulf of Guinea", "Gulf of Bothnia", "Gulf of Finland",
    "Gulf of Oman", "Gulf of Saint Lawrence", "Gulf of Thailand", "Gulf of Tonkin",
    "Gulf of Carpentaria", "Golfo de California", "Gulf of Honduras", "Gulf of Maine",
    "Gulf of Kutch", "Gulf of Mannar", "Shelikhova Gulf", "Amundsen Gulf",
    "Bahía de Campeche", "Golfe du Lion", "Golfo San Jorge", "Golfo de Panamá",
    # 10m-only gulfs
    "Gulf of Suez", "Gulf of Aqaba", "Gulf of Sidra", "Gulf of Gabès", "Gulf of Riga",
    "Gulf of Papua", "Gulf of Martaban", "Golfo de Tehuantepec", "Golfo San Matías",
    "Joseph Bonaparte Gulf", "Davao Gulf",
    # Bays
    "Bay of Biscay", "Baffin Bay", "Chesapeake Bay", "Great Australian Bight",
    "Bay of Fundy", "Bay of Plenty", "Bristol Bay", "James Bay", "Melville Bay",
    "Ungava Bay", "Cook Inlet", "Río de la Plata",
    # 10m-only bays
    "Delaware Bay", "San Francisco Bay", "Foxe Basin", "Bight of Benin", "Bight of Biafra",
    # Channels
    "Mozambique Channel", "Bristol Channel",
    # Passages
    "Davis Strait", "Drake Passage", "Straits of Florida", "Hudson Strait",
    "Korea Strait", "Luzon Strait", "Makassar Strait", "Strait of Singapore",
    "Taiwan Strait", "The North Western Passages", "Viscount Melville Sound",
})


def normalize_name(name: str) -> str:
    return NAME_NORMALIZE.get(name, name)


def marine_features_by_name(collection: Dict, allowed=GAME_WATER_NAMES) -> Dict[str, Dict]:
    """
    Allow-listed marine features keyed by normalised name.

    A name seen twice keeps its first position but takes the later feature.
    """
    by_name: Dict[str, Dict] = {}
    for feature in collection["features"]:
        name = normalize_name((feature.get("properties") or {}).get(MARINE_NAME_FIELD) or "")
        if name and name in allowed:
            by_name[name] = feature
    return by_name


def select_marine_features(coarse: Dict, fine: Dict, allowed=GAME_WATER_NAMES) -> Tuple[List[Dict], int, List[str]]:
    """
    Prefer the coarse (50m) source, falling back to the fine (10m) one for
    names the coarse source lacks.

    Returns the output features, how many came from the coarse source, and
    the allow-listed names found in neither.
    """
    features = [named_feature(name, f["geometry"]) for name, f in marine_features_by_name(coarse, allowed).items()]
    used = {f["properties"]["name"] for f in features}
    coarse_count = len(features)

    for feature in fine["features"]:
        name = normalize_name((feature.get("properties") or {}).get(MARINE_NAME_FIELD) or "")
        if name and name in allowed and name not in used:
            features.append(named_feature(name, feature["geometry"]))
            used.add(name)

    missing = sorted(allowed - used)
    return features, coarse_count, missing


def first_object(topology: Dict, label: str) -> str:
    names = object_names(topology)
    if not names:
        raise ValueError(f"{label} has no objects")
    return names[0]


def main(public_dir: Optional[Path] = None, output_path: Optional[Path] = None) -> int:
    public_dir = public_dir or PUBLIC_DIR
    output_path = output_path or public_dir / OUTPUT_FILE

    try:
        logger.info("Step 1: Loading source files...")
        countries50m = load_topology(public_dir / COUNTRIES_FILE)
        marine10m = load_topology(public_dir / MARINE_10M_FILE)
        marine50m = load_topology(public_dir / MARINE_50M_FILE)

        logger.info("Step 2: Converting countries to GeoJSON...")
        countries_geo = decode_object(countries50m, "countries")
        land_geo = decode_object(countries50m, "land")

        logger.info("Step 3: Extracting marine features...")
        marine50geo = decode_object(marine50m, first_object(marine50m, MARINE_50M_FILE))
        marine10geo = decode_object(marine10m, first_object(marine10m, MARINE_10M_FILE))

        marine_features, coarse_count, missing = select_marine_features(marine50geo, marine10geo)
        logger.info(f"  50m features used: {coarse_count}")
        logger.info(f"  10m-only features added: {len(marine_features) - coarse_count}")
        logger.info(f"  Total marine features: {len(marine_features)}")
        if missing:
            logger.warning(f"  ⚠ Missing features: {', '.join(missing)}")

        logger.info("Step 4: Building merged topology...")
        merged = build_topology(
            {
                "countries": countries_geo,
                "land": land_geo,
                "marine": feature_collection(marine_features),
            },
            QUANTIZATION,
        )
        restored = preserve_ids(merged, ids_by_name(countries50m, "countries"), "countries")
        logger.info(f"  Country ids preserved: {restored}")

        logger.info("Step 5: Writing output...")
        size = save_json_asset(output_path, merged)
    except (KeyError, ValueError, OSError) as e:
        logger.error(f"✗ Marine merge failed: {e}")
        return 1

    counts = geometry_counts(merged)
    logger.info(f"✓ Written: {output_path}")
    logger.info(f"  Size: {size / 1024:.0f} KB")
    logger.info(
        f"  Objects: countries ({counts.get('countries', 0)} geom), land, "
        f"marine ({counts.get('marine', 0)} geom)"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
