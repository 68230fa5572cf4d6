"""
Kickoff attribution.

A moment after each restart the ball has left the centre spot: whichever
half it sits in belongs to the team that lost the kickoff. Restarts are
checked a fixed delay after every goal's aligned second (except the
sudden-death goal), at the opening second and, after overtime, at the
first overtime second.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from rlsight.analysis.clock import ClockAligner
from rlsight.analysis.models import KickoffResult, KickoffSummary
from rlsight.core.config import AnalysisConfig
from rlsight.core.constants import BALL_REF, Team
from rlsight.core.errors import KickoffAmbiguousError
from rlsight.core.parser import GoalEvent
from rlsight.core.telemetry import PositionSample

logger = logging.getLogger(__name__)


def kickoff_winner(ball_y: float, second: int | None = None) -> Team:
    """Ball in orange's half means blue pushed it there, and vice versa."""
    if ball_y > 0:
        return Team.BLUE
    if ball_y < 0:
        return Team.ORANGE
    raise KickoffAmbiguousError(
        f"Ball still on the centre line at second {second} when checking the kickoff",
        second=second,
    )


def _check(
    second: int, kind: str, by_second: Mapping[int, Mapping[str, PositionSample]]
) -> KickoffResult | None:
    ball = by_second.get(second, {}).get(BALL_REF)
    if ball is None:
        return None
    return KickoffResult(second=second, winner=kickoff_winner(ball.y, second), ball_y=ball.y, kind=kind)


def compute_kickoffs(
    goals: Sequence[GoalEvent],
    clock: ClockAligner,
    by_second: Mapping[int, Mapping[str, PositionSample]],
    config: AnalysisConfig | None = None,
) -> KickoffSummary:
    """
    Tally every kickoff winner.

    Raises:
        KickoffAmbiguousError: The ball was on the centre line at a check
            second, or no ball sample exists for a post-goal check
    """
    config = config or AnalysisConfig()
    summary = KickoffSummary()

    checked = list(goals[:-1]) if clock.overtime else list(goals)
    for goal in checked:
        second = clock.seconds_at(goal.frame) - config.kickoff_time_delay
        result = _check(second, "goal", by_second)
        if result is None:
            raise KickoffAmbiguousError(
                f"No ball position at second {second} after the goal at frame {goal.frame}",
                second=second,
            )
        summary.results.append(result)

    opening = _check(config.opening_kickoff_second, "opening", by_second)
    if opening is not None:
        summary.results.append(opening)

    if clock.overtime:
        result = _check(config.overtime_kickoff_second, "overtime", by_second)
        if result is not None:
            summary.results.append(result)

    logger.debug(
        f"Kickoffs: {summary.total} total, blue {summary.wins_for(Team.BLUE)}, "
        f"orange {summary.wins_for(Team.ORANGE)}"
    )
    return summary
