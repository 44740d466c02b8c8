"""
Shared GeoJSON geometry helpers for the build scripts.

Geometries are plain GeoJSON dicts. Traversal dispatches on the declared
"type" rather than on how deeply the coordinate arrays happen to nest.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

Position = List[float]
Line = List[Position]
Ring = List[Position]
Polygon = List[Ring]

LINE_TYPES = ("LineString", "MultiLineString")
POLYGON_TYPES = ("Polygon", "MultiPolygon")


# ============================================
# DIMENSION STRIPPING
# ============================================

def strip_position(position: Sequence[float]) -> Position:
    """Drop elevation (or any extra ordinate) from a single position."""
    return [position[0], position[1]]


def strip_line(line: Iterable[Sequence[float]]) -> Line:
    return [strip_position(p) for p in line]


def strip_polygon(polygon: Iterable[Iterable[Sequence[float]]]) -> Polygon:
    return [strip_line(ring) for ring in polygon]


def strip_z(geometry: Dict) -> Dict:
    """Return a copy of a GeoJSON geometry with every position reduced to [lon, lat]."""
    gtype = geometry["type"]

    if gtype == "GeometryCollection":
        return {"type": gtype, "geometries": [strip_z(g) for g in geometry["geometries"]]}

    coords = geometry["coordinates"]
    if gtype == "Point":
        stripped = strip_position(coords)
    elif gtype in ("MultiPoint", "LineString"):
        stripped = strip_line(coords)
    elif gtype in ("MultiLineString", "Polygon"):
        stripped = [strip_line(part) for part in coords]
    elif gtype == "MultiPolygon":
        stripped = [strip_polygon(polygon) for polygon in coords]
    else:
        raise ValueError(f"Unsupported geometry type: {gtype}")

    return {"type": gtype, "coordinates": stripped}


# ============================================
# PART EXTRACTION
# ============================================

def extract_lines(geometry: Optional[Dict]) -> List[Line]:
    """Flatten a LineString/MultiLineString into 2D lines. Other types yield nothing."""
    if not geometry:
        return []
    gtype = geometry.get("type")
    if gtype == "LineString":
        return [strip_line(geometry["coordinates"])]
    if gtype == "MultiLineString":
        return [strip_line(line) for line in geometry["coordinates"]]
    return []


def extract_polygons(geometry: Optional[Dict]) -> List[Polygon]:
    """Flatten a Polygon/MultiPolygon into 2D polygons. Other types yield nothing."""
    if not geometry:
        return []
    gtype = geometry.get("type")
    if gtype == "Polygon":
        return [strip_polygon(geometry["coordinates"])]
    if gtype == "MultiPolygon":
        return [strip_polygon(polygon) for polygon in geometry["coordinates"]]
    return []


def polygons_of(geometry: Optional[Dict]) -> List[Polygon]:
    """
    Sub-polygon list of a polygonal geometry, without copying or stripping.

    A missing geometry has no sub-polygons.
    """
    if not geometry:
        return []
    gtype = geometry.get("type")
    if gtype == "Polygon":
        return [geometry["coordinates"]]
    if gtype == "MultiPolygon":
        return list(geometry["coordinates"])
    raise ValueError(f"Expected a polygonal geometry, got {gtype}")


# ============================================
# DEDUPLICATION
# ============================================

def endpoint_key(line: Sequence[Sequence[float]]) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    first = line[0]
    last = line[-1]
    return (first[0], first[1]), (last[0], last[1])


def dedupe_lines(lines: Iterable[Line]) -> List[Line]:
    """
    Drop lines whose start and end positions repeat an earlier line.

    The two river sources overlap heavily and the same segment often comes
    back from several name indexes. The first occurrence is kept.
    """
    seen = set()
    unique: List[Line] = []
    for line in lines:
        if not line:
            continue
        key = endpoint_key(line)
        if key in seen:
            continue
        seen.add(key)
        unique.append(line)
    return unique


def dedupe_polygons(polygons: Iterable[Polygon]) -> List[Polygon]:
    """Same as dedupe_lines, keyed on each polygon's outer ring."""
    seen = set()
    unique: List[Polygon] = []
    for polygon in polygons:
        if not polygon or not polygon[0]:
            continue
        key = endpoint_key(polygon[0])
        if key in seen:
            continue
        seen.add(key)
        unique.append(polygon)
    return unique


# ============================================
# MEASURES
# ============================================

def bbox(points: Sequence[Sequence[float]]) -> Tuple[float, float, float, float]:
    """Return (lon_min, lat_min, lon_max, lat_max) for a point sequence."""
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return min(xs), min(ys), max(xs), max(ys)


def mean_lon(points: Sequence[Sequence[float]]) -> float:
    return sum(p[0] for p in points) / len(points)


def mean_lat(points: Sequence[Sequence[float]]) -> float:
    return sum(p[1] for p in points) / len(points)


# ============================================
# ASSEMBLY
# ============================================

def lines_to_geometry(lines: List[Line]) -> Dict:
    if len(lines) == 1:
        return {"type": "LineString", "coordinates": lines[0]}
    return {"type": "MultiLineString", "coordinates": lines}


def polygons_to_geometry(polygons: List[Polygon]) -> Dict:
    if len(polygons) == 1:
        return {"type": "Polygon", "coordinates": polygons[0]}
    return {"type": "MultiPolygon", "coordinates": polygons}


def feature_collection(features: List[Dict]) -> Dict:
    return {"type": "FeatureCollection", "features": features}


def named_feature(name: str, geometry: Dict) -> Dict:
    return {"type": "Feature", "properties": {"name": name}, "geometry": geometry}
