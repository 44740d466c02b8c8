"""
Douglas-Peucker reduction for polylines and polygon rings.

Tolerances are in coordinate units (degrees for the Natural Earth sources).
"""

import math
from typing import Dict, List, Sequence

Point = Sequence[float]


def point_segment_distance(p: Point, a: Point, b: Point) -> float:
    """Distance from p to the segment a-b (not the infinite line)."""
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    len_sq = dx * dx + dy * dy
    if len_sq == 0:
        return math.hypot(p[0] - a[0], p[1] - a[1])
    t = ((p[0] - a[0]) * dx + (p[1] - a[1]) * dy) / len_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(p[0] - (a[0] + t * dx), p[1] - (a[1] + t * dy))


def simplify_dp(coords: Sequence[Point], tolerance: float) -> List[Point]:
    """
    Classic Douglas-Peucker over an ordered point sequence.

    Walks an explicit stack of (start, end) spans instead of recursing, which
    keeps long river centerlines clear of the interpreter recursion limit. The
    kept points are the same ones the recursive formulation keeps.
    """
    n = len(coords)
    if n <= 2:
        return list(coords)

    keep = [False] * n
    keep[0] = keep[n - 1] = True
    stack = [(0, n - 1)]

    while stack:
        start, end = stack.pop()
        max_dist = 0.0
        max_idx = start
        for i in range(start + 1, end):
            d = point_segment_distance(coords[i], coords[start], coords[end])
            if d > max_dist:
                max_dist = d
                max_idx = i
        if max_dist > tolerance:
            keep[max_idx] = True
            stack.append((max_idx, end))
            stack.append((start, max_idx))

    return [p for p, k in zip(coords, keep) if k]


def simplify_line(line: Sequence[Point], tolerance: float) -> List[Point]:
    """Simplify an open polyline. Lines of two points or fewer come back unchanged."""
    return simplify_dp(line, tolerance)


def simplify_ring(ring: Sequence[Point], tolerance: float) -> List[Point]:
    """
    Simplify a polygon ring and make sure it is still closed.

    Rings of four points or fewer are returned as-is (the smallest valid
    ring is a closed triangle).
    """
    if len(ring) <= 4:
        return list(ring)
    simplified = simplify_dp(ring, tolerance)
    if len(simplified) >= 3:
        first = simplified[0]
        last = simplified[-1]
        if first[0] != last[0] or first[1] != last[1]:
            simplified.append(list(first))
    return simplified


def simplify_geometry(geometry: Dict, tolerance: float) -> Dict:
    """
    Simplify a GeoJSON geometry dict by type.

    Lines use plain DP, rings are re-closed. Other geometry types pass
    through untouched.
    """
    gtype = geometry["type"]
    coords = geometry["coordinates"]

    if gtype == "LineString":
        return {"type": gtype, "coordinates": simplify_line(coords, tolerance)}
    if gtype == "MultiLineString":
        return {"type": gtype, "coordinates": [simplify_line(line, tolerance) for line in coords]}
    if gtype == "Polygon":
        return {"type": gtype, "coordinates": [simplify_ring(ring, tolerance) for ring in coords]}
    if gtype == "MultiPolygon":
        return {
            "type": gtype,
            "coordinates": [
                [simplify_ring(ring, tolerance) for ring in polygon] for polygon in coords
            ],
        }
    return geometry
