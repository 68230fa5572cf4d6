"""
Possession share from the ball's last-touch marker.

Every frame after the first touch is credited to the team that touched the
ball last, except frames inside a dead-ball window: the open interval
between a goal and the next clock tick, while the restart plays out.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from rlsight.analysis.clock import ClockAligner
from rlsight.analysis.models import PossessionShare
from rlsight.core.constants import Team
from rlsight.core.parser import GoalEvent
from rlsight.core.telemetry import PossessionSample

logger = logging.getLogger(__name__)


def dead_ball_windows(
    goals: Sequence[GoalEvent], clock: ClockAligner, overtime: bool = False
) -> list[tuple[int, int]]:
    """
    (goal_frame, restart_frame) pairs, both ends exclusive.

    No restart follows the sudden-death goal, so its window is left out when
    the match went to overtime. Goals after the last clock tick have no window.
    """
    checked = list(goals[:-1]) if overtime else list(goals)
    windows = []
    for goal in checked:
        restart = clock.next_sample_frame_after(goal.frame) if clock else None
        if restart is None:
            logger.debug(f"No clock tick after goal at frame {goal.frame}")
            continue
        windows.append((goal.frame, restart))
    return windows


def compute_possession(
    samples: Sequence[PossessionSample],
    frame_count: int,
    windows: Sequence[tuple[int, int]] = (),
) -> PossessionShare:
    """Credit each live frame to the running possessing team."""
    share = PossessionShare()
    if not samples or frame_count <= 0:
        return share

    frames = np.arange(frame_count)
    touch_frames = np.array([s.frame for s in samples], dtype=np.int64)
    touch_teams = np.array([int(s.team) for s in samples], dtype=np.int64)
    order = np.argsort(touch_frames, kind="stable")
    touch_frames, touch_teams = touch_frames[order], touch_teams[order]

    # Index of the latest touch at or before each frame
    latest = np.searchsorted(touch_frames, frames, side="right") - 1
    live = latest >= 0

    dead = np.zeros(frame_count, dtype=bool)
    for start, end in windows:
        dead |= (frames > start) & (frames < end)
    share.dead_ball_frames = int((dead & live).sum())
    live &= ~dead

    holders = touch_teams[latest[live]]
    for team in Team:
        share.frames[team] = int((holders == int(team)).sum())
    return share
