"""
Boost economy - average boost held per player.

Readings are mapped onto clock seconds through the shared nearest-frame
lookup; the last reading inside a second stands for that second, so bursts
of updates inside one second do not outweigh quiet stretches.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

import pandas as pd

from rlsight.analysis.clock import ClockAligner
from rlsight.core.constants import BOOST_MAX
from rlsight.core.telemetry import ResourceSample

logger = logging.getLogger(__name__)


def boost_by_second(samples: Sequence[ResourceSample], clock: ClockAligner) -> pd.Series:
    """Raw boost level per aligned second (last reading in the second wins)."""
    if not samples or not clock:
        return pd.Series(dtype="int64")
    frame = pd.DataFrame(
        {
            "frame": [s.frame for s in samples],
            "level": [s.level for s in samples],
        }
    )
    frame["second"] = clock.seconds_for_frames(frame["frame"].to_numpy())
    return frame.groupby("second", sort=False)["level"].last()


def average_boost(
    samples: Sequence[ResourceSample], clock: ClockAligner, boost_max: int = BOOST_MAX
) -> int | None:
    """Average boost as a rounded 0-100 percentage, None without readings."""
    per_second = boost_by_second(samples, clock)
    if per_second.empty:
        return None
    return round(float(per_second.mean()) / boost_max * 100)


def compute_boost(
    resources: Mapping[str, Sequence[ResourceSample]],
    identities: Iterable[str],
    clock: ClockAligner,
    boost_max: int = BOOST_MAX,
) -> dict[str, int | None]:
    """Average boost for each identity; spectators' readings are ignored."""
    result = {}
    for identity_id in identities:
        result[identity_id] = average_boost(resources.get(identity_id, []), clock, boost_max)
    missing = [identity_id for identity_id, value in result.items() if value is None]
    if missing:
        logger.debug(f"No boost readings for {len(missing)} player(s): {missing}")
    return result
