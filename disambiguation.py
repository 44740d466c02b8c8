"""
Geographic split of features that share a name in the source data.

Natural Earth labels several unrelated rivers with the same string (three
"Negro" rivers, the whole Paraná/Paraguay system as "Paraná", ...). A
DisambiguationRule decides per segment whether it belongs to a game feature,
using mean/min/max longitude and latitude against hand-tuned thresholds.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from geometry_tools import Line, bbox, mean_lat, mean_lon

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DisambiguationRule:
    keep: Callable[[Line], bool]
    description: str = ""


def mean_lon_above(threshold: float) -> DisambiguationRule:
    return DisambiguationRule(
        keep=lambda line: mean_lon(line) > threshold,
        description=f"mean longitude > {threshold}",
    )


def mean_lon_below(threshold: float) -> DisambiguationRule:
    return DisambiguationRule(
        keep=lambda line: mean_lon(line) < threshold,
        description=f"mean longitude < {threshold}",
    )


def mean_lat_above(threshold: float) -> DisambiguationRule:
    return DisambiguationRule(
        keep=lambda line: mean_lat(line) > threshold,
        description=f"mean latitude > {threshold}",
    )


def within_mean_box(lon_min: float, lat_min: float, lon_max: float, lat_max: float) -> DisambiguationRule:
    """Keep segments whose mean position falls strictly inside the box."""

    def keep(line: Line) -> bool:
        lon = mean_lon(line)
        lat = mean_lat(line)
        return lon_min < lon < lon_max and lat_min < lat < lat_max

    return DisambiguationRule(
        keep=keep,
        description=f"mean position inside ({lon_min}, {lat_min}, {lon_max}, {lat_max})",
    )


# ============================================
# PARANÁ / PARAGUAY
# ============================================

def is_paraguay_corridor(line: Line) -> bool:
    """
    True for segments of the real Paraguay River.

    The confluence with the Paraná is near (-58.5, -27.3). The Paraguay runs
    north-south west of lon -56 down to that point; its headwaters sit near
    lat -14/-15 west of lon -55.
    """
    _, lat_min, _, lat_max = bbox(line)
    avg_lon = mean_lon(line)
    if avg_lon < -56 and lat_max > -27.5 and lat_min > -28:
        return True
    if lat_max > -15 and avg_lon < -55:
        return True
    return False


PARAGUAY_RULE = DisambiguationRule(
    keep=is_paraguay_corridor,
    description="Paraguay corridor west of lon -56, north of the Paraná confluence",
)

PARANA_RULE = DisambiguationRule(
    keep=lambda line: not is_paraguay_corridor(line),
    description="everything labelled Paraná outside the Paraguay corridor",
)


def disambiguate(game_name: str, lines: Sequence[Line], rule: Optional[DisambiguationRule]) -> List[Line]:
    """
    Keep only the candidate segments the rule accepts.

    When the rule rejects every candidate the unfiltered set is returned and a
    warning is logged; a stale threshold must not wipe a feature out.
    """
    if rule is None:
        return list(lines)

    kept = [line for line in lines if rule.keep(line)]
    if kept:
        if len(kept) < len(lines):
            logger.info(f"  Split {game_name}: kept {len(kept)}/{len(lines)} segments ({rule.description})")
        return kept

    if lines:
        logger.warning(
            f"  ⚠ Split filter for {game_name} removed all {len(lines)} segments - keeping original"
        )
    return list(lines)
