"""
Corrective moves of sub-polygons between named country entities.

Operates on the GeoJSON view of a topology's countries object:

- move: take the one sub-polygon of the source entity whose outer-ring
  bounding box lies strictly inside a lon/lat rectangle and append it to
  the target entity.
- merge: append every sub-polygon of the secondary entity to the primary
  entity and drop the secondary entity from the collection.

These run as one-shot fixes against a known input file, so anything
unexpected (a missing entity, a rectangle matching nothing) raises
RelocationError instead of guessing.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from shapely.geometry import Polygon as ShapelyPolygon

from geometry_tools import polygons_of

logger = logging.getLogger(__name__)

MOVE = "move"
MERGE = "merge"

BBox = Tuple[float, float, float, float]


class RelocationError(Exception):
    """A relocation's assumptions about the input data do not hold."""


@dataclass(frozen=True)
class EntityRelocation:
    """
    One corrective operation.

    For MOVE, source loses the sub-polygon inside bbox and target gains it.
    For MERGE, source is absorbed into target and disappears; bbox is unused.
    """
    kind: str
    source: str
    target: str
    bbox: Optional[BBox] = None

    def describe(self) -> str:
        if self.kind == MOVE:
            return f"move {self.source} sub-polygon in {self.bbox} -> {self.target}"
        return f"merge {self.source} into {self.target}"


def find_entity(collection: Dict, name: str) -> int:
    for i, feature in enumerate(collection["features"]):
        if (feature.get("properties") or {}).get("name") == name:
            return i
    raise RelocationError(f"Could not find entity '{name}'")


def polygon_bbox(polygon: List) -> BBox:
    """Bounding box of a sub-polygon's outer ring."""
    return ShapelyPolygon(polygon[0]).bounds


def bbox_within(inner: BBox, outer: BBox) -> bool:
    return (
        inner[0] > outer[0]
        and inner[2] < outer[2]
        and inner[1] > outer[1]
        and inner[3] < outer[3]
    )


def _append_polygons(feature: Dict, polygons: List) -> None:
    """Append sub-polygons, promoting Polygon (or no geometry) to MultiPolygon."""
    existing = polygons_of(feature.get("geometry"))
    feature["geometry"] = {"type": "MultiPolygon", "coordinates": existing + polygons}


def move_sub_polygon(collection: Dict, source: str, target: str, bbox: BBox) -> Dict:
    """Return a copy of the collection with one sub-polygon moved from source to target."""
    result = copy.deepcopy(collection)
    source_feature = result["features"][find_entity(result, source)]
    target_feature = result["features"][find_entity(result, target)]

    polygons = polygons_of(source_feature.get("geometry"))
    candidates = [i for i, polygon in enumerate(polygons) if bbox_within(polygon_bbox(polygon), bbox)]
    if not candidates:
        raise RelocationError(f"No sub-polygon of '{source}' lies within {bbox}")
    if len(candidates) > 1:
        logger.warning(f"  ⚠ {len(candidates)} sub-polygons of {source} lie within {bbox}; moving #{candidates[0]}")

    index = candidates[0]
    if len(polygons) == 1:
        raise RelocationError(f"Moving polygon #{index} would leave '{source}' without geometry")

    logger.info(f"  Found sub-polygon #{index} of {source} ({len(polygons)} polygons)")
    moved = polygons.pop(index)
    source_feature["geometry"] = {"type": "MultiPolygon", "coordinates": polygons}
    _append_polygons(target_feature, [moved])

    logger.info(f"  {source} polygons after removal: {len(polygons)}")
    logger.info(f"  {target} polygons after addition: {len(target_feature['geometry']['coordinates'])}")
    return result


def merge_entities(collection: Dict, primary: str, secondary: str) -> Dict:
    """Return a copy of the collection with secondary folded into primary and removed."""
    result = copy.deepcopy(collection)
    primary_index = find_entity(result, primary)
    secondary_index = find_entity(result, secondary)

    primary_feature = result["features"][primary_index]
    absorbed = polygons_of(result["features"][secondary_index].get("geometry"))
    logger.info(f"  {secondary} polygons: {len(absorbed)}")

    _append_polygons(primary_feature, absorbed)
    del result["features"][secondary_index]

    logger.info(f"  {primary} polygons after merge: {len(primary_feature['geometry']['coordinates'])}")
    logger.info(f"  Total entities after removal: {len(result['features'])}")
    return result


def apply_relocation(collection: Dict, relocation: EntityRelocation) -> Dict:
    if relocation.kind == MOVE:
        if relocation.bbox is None:
            raise RelocationError(f"Move of '{relocation.source}' needs a bounding box")
        return move_sub_polygon(collection, relocation.source, relocation.target, relocation.bbox)
    if relocation.kind == MERGE:
        return merge_entities(collection, relocation.target, relocation.source)
    raise RelocationError(f"Unknown relocation kind: {relocation.kind}")


def apply_relocations(collection: Dict, relocations) -> Dict:
    for relocation in relocations:
        logger.info(f"Applying: {relocation.describe()}")
        collection = apply_relocation(collection, relocation)
    return collection
