#!/usr/bin/env python3
"""
============================================
PURPOSE: Build rivers.json from Natural Earth 10m river centerlines
INPUT: ne_10m_rivers_lake_centerlines + the scale-rank variant (HTTPS)
OUTPUT: public/rivers.json - one LineString/MultiLineString per game river
RUN IN: Terminal (python build_rivers.py)
============================================

1. Fetches BOTH the base centerlines and the scale-rank variant (the latter
   has ~3x more features, including many rivers missing from the base file)
2. Matches rivers by the name, name_en AND name_alt fields
3. Merges multi-segment rivers into single features, dropping repeated
   segments and splitting same-named rivers geographically
4. Simplifies geometries using Douglas-Peucker
5. Writes public/rivers.json
"""

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import requests

from disambiguation import (
    PARANA_RULE,
    PARAGUAY_RULE,
    DisambiguationRule,
    disambiguate,
    mean_lat_above,
    mean_lon_above,
    mean_lon_below,
    within_mean_box,
)
from feature_matcher import FeatureMatcher
from geometry_tools import dedupe_lines, extract_lines, feature_collection, lines_to_geometry, named_feature
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
OUTPUT_FILE = "rivers.json"

# Base dataset (~1 455 features)
NE_URL = natural_earth_url("ne_10m_rivers_lake_centerlines")
# Scale-rank dataset (~4 224 features) - contains rivers not in the base file
NE_SR_URL = natural_earth_url("ne_10m_rivers_lake_centerlines_scale_rank")

SIMPLIFY_TOLERANCE = 0.035

# Game river name -> Natural Earth name values to match (name, name_en, name_alt)
RIVER_MAP: Dict[str, Tuple[str, ...]] = {
    "Nile":        ("Nile",),
    "Amazon":      ("Amazon", "Amazonas"),
    "Mississippi": ("Mississippi",),
    "Danube":      ("Danube",),
    "Rhine":       ("Rhine",),
    "Thames":      ("Thames",),
    "Yangtze":     ("Yangtze", "Chang Jiang"),
    "Ganges":      ("Ganges", "Ganga"),
    "Mekong":      ("Mekong", "Mékong"),
    "Congo":       ("Congo",),
    "Volga":       ("Volga",),
    "Zambezi":     ("Zambezi",),
    "Niger":       ("Niger",),
    "Indus":       ("Indus",),

    # Africa
    "Orange River":   ("Orange",),
    "Limpopo":        ("Limpopo",),
    "Senegal River":  ("Sénégal", "Senegal"),
    "Blue Nile":      ("Blue Nile", "El Bahr el Azraq", "Abay"),
    "White Nile":     ("White Nile", "Bahr el Jebel", "El Bahr el Abyad", "Victoria Nile", "Albert Nile"),
    "Volta":          ("Volta",),
    "Okavango":       ("Okavango", "Cubango"),
    "Ubangi":         ("Ubangi", "Oubangui"),
    "Kasai":          ("Kasai",),
    "Jubba":          ("Jubba", "Juba"),
    "Shabelle":       ("Shabelle", "Shebelle", "Shebele", "Shabeelle"),

    # Asia
    "Yellow River":     ("Yellow", "Huang He", "Huang"),
    "Ob":               ("Ob",),
    "Yenisei":          ("Yenisei", "Yenisey"),
    "Lena":             ("Lena",),
    "Amur":             ("Amur",),
    "Irrawaddy":        ("Irrawaddy", "Ayeyarwady"),
    "Salween":          ("Salween", "Thanlwin", "Nu"),
    "Brahmaputra":      ("Brahmaputra",),
    "Tigris":           ("Tigris",),
    "Euphrates":        ("Euphrates", "Fırat"),
    "Amu Darya":        ("Amu Darya", "Amu"),
    "Syr Darya":        ("Syr Darya", "Syr"),
    "Jordan River":     ("Jordan",),
    "Helmand":          ("Helmand",),
    "Godavari":         ("Godavari", "Godävari"),
    "Krishna":          ("Krishna",),
    "Narmada":          ("Narmada",),
    "Chao Phraya":      ("Chao Phraya",),
    "Red River (Asia)": ("Red", "Hong"),
    "Pearl River":      ("Pearl", "Zhu"),
    "Xi River":         ("Xi",),
    "Kolyma":           ("Kolyma",),
    "Indigirka":        ("Indigirka",),
    "Ural River":       ("Ural",),

    # Europe
    "Seine":          ("Seine",),
    "Loire":          ("Loire",),
    "Po":             ("Po",),
    "Elbe":           ("Elbe",),
    "Oder":           ("Oder",),
    "Vistula":        ("Vistula", "Wisła"),
    "Dnieper":        ("Dnieper", "Dnepr", "Dnipro"),
    "Don":            ("Don",),
    "Tagus":          ("Tagus", "Tajo", "Tejo"),
    "Ebro":           ("Ebro",),
    "Garonne":        ("Garonne",),
    "Rhône":          ("Rhône", "Rhone"),
    "Tiber":          ("Tiber", "Tevere"),
    "Shannon":        ("Shannon",),
    "Dniester":       ("Dniester", "Dnestr"),
    "Douro":          ("Douro", "Duero"),
    "Guadalquivir":   ("Guadalquivir",),
    "Dvina":          ("Dvina",),
    "Pechora":        ("Pechora",),
    "Kama":           ("Kama",),

    # North America
    "Missouri":       ("Missouri",),
    "Colorado River": ("Colorado",),
    "Columbia":       ("Columbia",),
    "Rio Grande":     ("Rio Grande",),
    "Yukon":          ("Yukon",),
    "Mackenzie":      ("Mackenzie",),
    "Ohio":           ("Ohio",),
    "St. Lawrence":   ("St. Lawrence", "Saint Lawrence"),
    "Arkansas River": ("Arkansas",),
    "Red River (NA)": ("Red",),
    "Snake River":    ("Snake",),
    "Saskatchewan":   ("Saskatchewan",),
    "Nelson":         ("Nelson",),
    "Churchill":      ("Churchill",),
    "Fraser":         ("Fraser",),
    "Tennessee":      ("Tennessee",),
    "Platte":         ("Platte",),
    "Peace River":    ("Peace",),
    "Athabasca":      ("Athabasca",),
    "Ottawa River":   ("Ottawa",),

    # South America
    # NE labels the whole Paraná+Paraguay system "Paraná"; SPLIT_RIVERS separates them
    "Paraná":         ("Paraná", "Parana"),
    "Paraguay River": ("Paraná", "Parana"),
    "Orinoco":        ("Orinoco",),
    "São Francisco":  ("São Francisco", "São  Francisco", "Sao Francisco"),
    "Magdalena":      ("Magdalena",),
    "Uruguay River":  ("Uruguay",),
    "Tocantins":      ("Tocantins",),
    "Madeira":        ("Madeira",),
    "Negro":          ("Negro",),
    "Putumayo":       ("Putumayo",),
    "Japurá":         ("Japurá", "Caquetá"),
    "Xingu":          ("Xingu",),
    "Tapajós":        ("Tapajós", "Tapajos"),
    "Araguaia":       ("Araguaia",),

    # Oceania
    "Murray":         ("Murray",),
    "Darling":        ("Darling",),
}

# Rivers whose name collides with geographically distinct features in NE.
# Thresholds are tuned against the current NE release.
SPLIT_RIVERS: Dict[str, DisambiguationRule] = {
    # Paraguay corridor vs the rest of the "Paraná" system
    "Paraguay River": PARAGUAY_RULE,
    "Paraná": PARANA_RULE,
    # Amazon tributary only (lat -3..+4); Patagonia ~-40, Uruguay ~-32
    "Negro": mean_lat_above(-5),
    # US Colorado (lat 32-40); Argentina ~-38
    "Colorado River": mean_lat_above(25),
    # Vietnam/China Red River; "Red" matches rivers worldwide
    "Red River (Asia)": mean_lon_above(90),
    # Red River of the North and Red River (TX/OK)
    "Red River (NA)": within_mean_box(-110, 25, -80, 55),
    # Manitoba (~-103) vs Labrador (~-64)
    "Churchill": mean_lon_below(-90),
    # British Columbia (~-121) vs spurious Labrador match (~-63)
    "Fraser": mean_lon_below(-115),
    # NWT (~-127) vs spurious Australia match (~+149)
    "Mackenzie": mean_lon_below(0),
    # Northern Dvina (~44) vs Western Dvina / Daugava (~30)
    "Dvina": mean_lon_above(35),
}

# Prevents "Rio Grande" from matching "Río Grande de Matagalpa" etc.
EXACT_MATCH_ONLY = frozenset({"Rio Grande"})


# ============================================
# BUILD
# ============================================

def build_river_features(
    source_features: Sequence[Dict],
    river_map: Mapping[str, Sequence[str]] = RIVER_MAP,
    split_rules: Mapping[str, DisambiguationRule] = SPLIT_RIVERS,
    exact_match_only=EXACT_MATCH_ONLY,
    tolerance: float = SIMPLIFY_TOLERANCE,
) -> Tuple[List[Dict], List[str]]:
    """
    Match, clean, split and simplify every declared river.

    Returns the output features in river_map order and the names that
    matched nothing.
    """
    matcher = FeatureMatcher(source_features, exact_match_only=exact_match_only)
    sizes = matcher.index_sizes()
    logger.info(f"  Unique names: {sizes['name']}, name_en: {sizes['name_en']}, name_alt: {sizes['name_alt']}")

    output_features = []
    missing = []

    for game_name, patterns in river_map.items():
        segments = matcher.match(game_name, patterns)
        if not segments:
            missing.append(game_name)
            continue

        lines = []
        for segment in segments:
            lines.extend(extract_lines(segment.get("geometry")))
        lines = dedupe_lines(lines)
        lines = disambiguate(game_name, lines, split_rules.get(game_name))

        if not lines:
            missing.append(game_name)
            continue

        geometry = simplify_geometry(lines_to_geometry(lines), tolerance)
        output_features.append(named_feature(game_name, geometry))

    return output_features, missing


def main(output_path: Optional[Path] = None, urls: Optional[Sequence[str]] = None) -> int:
    output_path = output_path or PUBLIC_DIR / OUTPUT_FILE
    base_url, scale_rank_url = urls or (NE_URL, NE_SR_URL)

    try:
        logger.info("Step 1: Fetching Natural Earth 10m rivers...")
        base = fetch_feature_collection(base_url, "base")
        scale_rank = fetch_feature_collection(scale_rank_url, "scale-rank")

        # Segments repeated across both files are dropped per river later
        all_features = base["features"] + scale_rank["features"]
        logger.info(f"  Combined features: {len(all_features)}")

        logger.info("Step 2: Matching rivers...")
        features, missing = build_river_features(all_features)

        logger.info(f"  Matched rivers: {len(features)}/{len(RIVER_MAP)}")
        if missing:
            logger.warning(f"  ⚠ Missing: {', '.join(missing)}")

        logger.info("Step 3: Writing output...")
        size = save_json_asset(output_path, feature_collection(features))
    except (requests.exceptions.RequestException, ValueError, OSError) as e:
        logger.error(f"✗ Rivers build failed: {e}")
        return 1

    logger.info(f"✓ Written: {output_path}")
    logger.info(f"  Features: {len(features)}")
    logger.info(f"  Size: {size / 1024:.0f} KB")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
