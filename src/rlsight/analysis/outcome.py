"""
Match outcome: game-winning goal and MVP.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from rlsight.analysis.models import MvpResult, PlayerMatchStats
from rlsight.core.constants import Team
from rlsight.core.parser import GoalEvent


def find_game_winning_goal(goals: Sequence[GoalEvent]) -> GoalEvent | None:
    """
    The last goal scored while the running score was level.

    After it the scoring team is never caught again. Returns None when there
    were no goals or the final score is level.
    """
    tally = {Team.BLUE: 0, Team.ORANGE: 0}
    winner = None
    for goal in goals:
        if tally[Team.BLUE] == tally[Team.ORANGE]:
            winner = goal
        tally[goal.scorer_team] += 1
    if tally[Team.BLUE] == tally[Team.ORANGE]:
        return None
    return winner


def find_mvp(players: Mapping[str, PlayerMatchStats]) -> MvpResult | None:
    """Highest scoreboard score. Ties are reported, not broken."""
    if not players:
        return None
    best = max(p.score for p in players.values())
    candidates = sorted(identity_id for identity_id, p in players.items() if p.score == best)
    return MvpResult(score=best, candidates=candidates)
