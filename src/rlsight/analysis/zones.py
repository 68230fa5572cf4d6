"""
Zone occupancy - where each player and the ball spent the match.

Both halves and zones are read off the y axis: blue defends y < 0, orange
defends y > 0. Zones split the pitch at +/- the zone threshold with a
midfield band between. Altitude bands are cumulative: a sample above the
high bound also counts as medium and low.
"""

from __future__ import annotations

import logging

import pandas as pd

from rlsight.analysis.models import ZoneOccupancy
from rlsight.core.constants import HEIGHT_BOUNDS, ZONE_THRESHOLD
from rlsight.core.utils import timed

logger = logging.getLogger(__name__)


def half_masks(y):
    """(orange, blue) half membership; the centre line is in neither."""
    return y > 0, y < 0


def zone_masks(y, threshold: float = ZONE_THRESHOLD):
    """(orange, blue, midfield) zone membership; the midfield band includes its edges."""
    return y > threshold, y < -threshold, (y >= -threshold) & (y <= threshold)


def height_buckets(z, bounds: tuple[float, float, float] = HEIGHT_BOUNDS):
    """(low, medium, high) membership; each band includes everything above it."""
    low, medium, high = bounds
    return z >= low, z >= medium, z >= high


@timed
def compute_zone_occupancy(
    positions: pd.DataFrame,
    match_frames: int,
    threshold: float = ZONE_THRESHOLD,
    bounds: tuple[float, float, float] = HEIGHT_BOUNDS,
) -> dict[str, ZoneOccupancy]:
    """
    Count samples per half, zone and altitude band for every entity ref.

    Args:
        positions: Position samples (see TelemetrySeries.positions_frame)
        match_frames: Clock frame count used to scale counts into seconds
        threshold: Distance from centre where a defensive zone starts
        bounds: Low, medium and high altitude bounds

    Returns:
        Dict mapping entity ref (identity id or "ball") to its occupancy
    """
    if positions.empty:
        return {}

    result: dict[str, ZoneOccupancy] = {}
    for ref, group in positions.groupby("entity_ref", sort=False):
        orange_half, blue_half = half_masks(group["y"])
        orange_zone, blue_zone, midfield = zone_masks(group["y"], threshold)
        low, medium, high = height_buckets(group["z"], bounds)
        result[str(ref)] = ZoneOccupancy(
            entity_ref=str(ref),
            match_frames=match_frames,
            samples=len(group),
            orange_half=int(orange_half.sum()),
            blue_half=int(blue_half.sum()),
            orange_zone=int(orange_zone.sum()),
            blue_zone=int(blue_zone.sum()),
            midfield=int(midfield.sum()),
            airtime_low=int(low.sum()),
            airtime_medium=int(medium.sum()),
            airtime_high=int(high.sum()),
        )

    logger.debug(f"Zone occupancy computed for {len(result)} entities")
    return result
