"""
Proximity-based ball control: who was closest to the ball each second.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Collection, Mapping

import numpy as np

from rlsight.core.constants import BALL_REF
from rlsight.core.telemetry import PositionSample
from rlsight.core.utils import timed

logger = logging.getLogger(__name__)


def closest_to_ball(
    bucket: Mapping[str, PositionSample], playing: Collection[str]
) -> str | None:
    """Playing identity nearest the ball in one second's bucket (first wins on a tie)."""
    ball = bucket.get(BALL_REF)
    if ball is None:
        return None
    refs = [ref for ref in bucket if ref != BALL_REF and ref in playing]
    if not refs:
        return None
    points = np.array([bucket[ref].position for ref in refs], dtype=float)
    distances = np.linalg.norm(points - np.array(ball.position, dtype=float), axis=1)
    return refs[int(np.argmin(distances))]


@timed
def compute_proximity(
    by_second: Mapping[int, Mapping[str, PositionSample]], playing: Collection[str]
) -> Counter[str]:
    """One tick per second for the nearest player; seconds without a ball are skipped."""
    ticks: Counter[str] = Counter()
    for bucket in by_second.values():
        closest = closest_to_ball(bucket, playing)
        if closest is not None:
            ticks[closest] += 1
    logger.debug(f"Proximity: {sum(ticks.values())} credited seconds")
    return ticks


def closest_percent(ticks: int, total: int) -> int | None:
    if total == 0:
        return None
    return round(ticks / total * 100)
