"""
Data Models for Rocket League Replay Analysis

Dataclasses produced by the analytics engine and consumed by the
orchestrator when it builds the report. Counts are kept raw here; rounding
and scaling into seconds or percentages happens in the properties.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from rlsight.core.constants import Team
from rlsight.core.schemas import AnalysisWarning

# =============================================================================
# Spatial occupancy
# =============================================================================


@dataclass
class ZoneOccupancy:
    """Sample counts per half, zone and altitude band for one entity.

    Counts become estimated seconds by scaling with the number of clock
    frames: ``match_frames / samples * count``. Half time excludes samples
    sitting exactly on the centre line; an estimate with no samples to
    scale by is None.
    """

    entity_ref: str
    match_frames: int = 0
    samples: int = 0
    orange_half: int = 0
    blue_half: int = 0
    orange_zone: int = 0
    blue_zone: int = 0
    midfield: int = 0
    airtime_low: int = 0
    airtime_medium: int = 0
    airtime_high: int = 0

    def _estimate(self, count: int, denominator: int) -> float | None:
        if denominator == 0:
            return None
        return round(self.match_frames / denominator * count, 2)

    def half_time(self, team: Team) -> float | None:
        """Estimated seconds spent in ``team``'s half."""
        count = self.orange_half if team is Team.ORANGE else self.blue_half
        return self._estimate(count, self.orange_half + self.blue_half)

    @property
    def orange_zone_time(self) -> float | None:
        return self._estimate(self.orange_zone, self.samples)

    @property
    def blue_zone_time(self) -> float | None:
        return self._estimate(self.blue_zone, self.samples)

    @property
    def midfield_time(self) -> float | None:
        return self._estimate(self.midfield, self.samples)

    @property
    def airtime_low_time(self) -> float | None:
        return self._estimate(self.airtime_low, self.samples)

    @property
    def airtime_medium_time(self) -> float | None:
        return self._estimate(self.airtime_medium, self.samples)

    @property
    def airtime_high_time(self) -> float | None:
        return self._estimate(self.airtime_high, self.samples)


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class KickoffResult:
    """Who won one kickoff, read off the ball's half a moment after the restart."""

    second: int
    winner: Team
    ball_y: float
    kind: str  # "goal", "opening" or "overtime"


@dataclass
class KickoffSummary:
    results: list[KickoffResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    def wins_for(self, team: Team) -> int:
        return sum(1 for result in self.results if result.winner is team)


@dataclass
class PossessionShare:
    """Frames of live play attributed to each team's last touch."""

    frames: dict[Team, int] = field(default_factory=lambda: {Team.BLUE: 0, Team.ORANGE: 0})
    dead_ball_frames: int = 0

    @property
    def counted(self) -> int:
        return sum(self.frames.values())

    def percent(self, team: Team) -> float | None:
        if self.counted == 0:
            return None
        return round(self.frames[team] / self.counted * 100, 2)


@dataclass
class GoalSummary:
    """A header goal enriched with its aligned second and ball position."""

    frame: int
    scorer_name: str
    scorer_team: Team
    second: int | None = None
    position: tuple[float, float, float] | None = None


@dataclass
class MvpResult:
    """Highest scoreboard score; more than one candidate means a tie."""

    score: int
    candidates: list[str] = field(default_factory=list)  # identity ids

    @property
    def tied(self) -> bool:
        return len(self.candidates) > 1


# =============================================================================
# Player and team statistics
# =============================================================================


@dataclass
class PlayerMatchStats:
    """Per-player statistics for the match."""

    identity_id: str
    key: str
    name: str
    team: Team
    score: int = 0
    goals: int = 0
    shots: int = 0
    assists: int = 0
    saves: int = 0
    points_score: int = 0
    car: str | None = None
    camera: Any = None
    join_frame: int = 0
    leave_frame: int | None = None

    avg_boost: int | None = None
    zones: ZoneOccupancy | None = None
    frames_closest: int | None = None
    closest_percent: int | None = None
    mvp: bool = False

    @property
    def play_score(self) -> int:
        """Scoreboard points earned outside goals, assists, saves and shots."""
        return self.score - self.points_score

    @property
    def attacking_half_time(self) -> float | None:
        return self.zones.half_time(self.team.opponent) if self.zones else None

    @property
    def defending_half_time(self) -> float | None:
        return self.zones.half_time(self.team) if self.zones else None


@dataclass
class TeamMatchStats:
    """Team aggregates folded from the players' statistics."""

    team: Team
    players: int = 0
    score: int = 0
    goals: int = 0
    assists: int = 0
    saves: int = 0
    shots: int = 0
    points_score: int = 0
    play_score: int = 0
    avg_boost: int | None = None
    frames_closest: int | None = None
    closest_percent: int | None = None
    orange_zone_time: float | None = None
    blue_zone_time: float | None = None
    midfield_time: float | None = None
    air_time: float | None = None
    attack_time: float | None = None
    defense_time: float | None = None
    possession: float | None = None
    kickoff_wins: int | None = None

    @property
    def avg_score(self) -> int | None:
        if self.players == 0:
            return None
        return round(self.score / self.players)


@dataclass
class MatchAnalysis:
    """Complete analysis result for one replay."""

    metadata: dict[str, Any]
    players: dict[str, PlayerMatchStats]  # identity id -> stats
    teams: dict[Team, TeamMatchStats]
    overtime: bool = False
    match_time: int = 0
    goals: list[GoalSummary] = field(default_factory=list)
    ball_zones: ZoneOccupancy | None = None
    possession: PossessionShare | None = None
    kickoffs: KickoffSummary | None = None
    total_closest: int = 0
    gwg: GoalSummary | None = None
    gwg_key: str | None = None
    mvp: MvpResult | None = None
    facts: dict[str, Any] = field(default_factory=dict)
    unavailable: dict[str, str] = field(default_factory=dict)  # stat -> reason
    warnings: list[AnalysisWarning] = field(default_factory=list)

    def players_on(self, team: Team) -> list[PlayerMatchStats]:
        return [p for p in self.players.values() if p.team is team]
