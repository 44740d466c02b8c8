"""
============================================
PURPOSE: Fetch Natural Earth GeoJSON sources and read/write JSON assets
INPUT: Public HTTPS URLs (raw GitHub copies of natural-earth-vector)
OUTPUT: Parsed FeatureCollections; compact JSON files in the public folder
============================================

Fetches are retried a fixed number of times with a fixed delay between
attempts. Exhausting the retries re-raises the last error so the calling
build aborts before anything is written.
"""

import json
import time
from pathlib import Path
from typing import Any, Dict
import logging

import requests

logger = logging.getLogger(__name__)

# ============================================
# CONFIGURATION
# ============================================

NE_GEOJSON_BASE = "https://raw.githubusercontent.com/nvkelso/natural-earth-vector/master/geojson"

# Retry settings
MAX_RETRIES = 3
RETRY_DELAY = 2

# Per-attempt timeout in seconds; a run as a whole has no deadline
REQUEST_TIMEOUT = 120


def natural_earth_url(dataset: str) -> str:
    """URL of a Natural Earth GeoJSON file, e.g. 'ne_10m_lakes'."""
    return f"{NE_GEOJSON_BASE}/{dataset}.geojson"


def fetch_json(url: str, label: str) -> Any:
    """
    GET a JSON document with retry logic.

    Network errors and non-2xx responses are retried. A body that does not
    parse as JSON is not: it raises straight away.
    """
    response = None
    for attempt in range(MAX_RETRIES):
        try:
            logger.info(f"  Fetching {label}... (attempt {attempt + 1})")
            response = requests.get(url, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            break
        except requests.exceptions.RequestException as e:
            logger.warning(f"  Attempt {attempt + 1}/{MAX_RETRIES} failed: {e}")
            if attempt < MAX_RETRIES - 1:
                time.sleep(RETRY_DELAY)
            else:
                logger.error(f"✗ Failed to fetch {label} after all retries")
                raise

    try:
        return json.loads(response.text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Malformed JSON from {label} ({url}): {e}") from e


def fetch_feature_collection(url: str, label: str) -> Dict:
    """Fetch a GeoJSON FeatureCollection and check its shape."""
    data = fetch_json(url, label)
    if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
        raise ValueError(f"{label} is not a GeoJSON FeatureCollection ({url})")
    if not isinstance(data.get("features"), list):
        raise ValueError(f"{label} has no features array ({url})")
    logger.info(f"  {label} features: {len(data['features'])}")
    return data


def load_json(path: Path) -> Any:
    """Read a JSON file from disk; malformed content raises ValueError."""
    with open(path, 'r', encoding='utf-8') as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Malformed JSON in {path}: {e}") from e


def save_json_asset(path: Path, data: Any) -> int:
    """
    Write compact JSON, replacing any previous version of the asset.

    The document is serialised before the file is opened so a failure never
    leaves a truncated asset behind. Returns the size in bytes.
    """
    text = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(text)
    return path.stat().st_size
