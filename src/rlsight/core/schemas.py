"""
RLSight Data Contracts

Every dictionary shape that crosses a module boundary is defined here.
If you need a field that doesn't exist here, ADD IT HERE FIRST,
then update the producer and consumer.

Producers: telemetry.py, analysis/analytics.py, pipeline/orchestrator.py
Consumers: pipeline/contract.py, downstream report writers
"""

from __future__ import annotations

from typing import Any, NotRequired, TypedDict


# ============================================================
# GOALS
# ============================================================


class BallPosition(TypedDict):
    x: float
    y: float
    z: float


class GoalRecord(TypedDict):
    """A goal enriched with its aligned clock second and ball position."""

    frame: int
    PlayerName: str
    PlayerTeam: int  # 0 = blue, 1 = orange
    Second: int | None
    Position: BallPosition | None


# ============================================================
# PLAYERS AND TEAMS
# ============================================================


class PlayerReport(TypedDict):
    """One playing player's entry under player_data[team][key]."""

    ID: str
    Name: str
    Team: str  # "orange" or "blue"
    Score: int
    Goals: int
    Shots: int
    Assists: int
    Saves: int
    Points_Score: int
    Play_Score: int
    AVG_Boost: int | None
    Attacking_Half_Time: float | None
    Defending_Half_Time: float | None
    Orange_Zone_Time: float | None
    Blue_Zone_Time: float | None
    Midfield_Time: float | None
    Airtime_Low: float | None
    Airtime_Medium: float | None
    Airtime_High: float | None
    Frames_Closest: int | None
    Closest_Percent: int | None
    MVP: bool
    Car: NotRequired[str | None]
    Camera: NotRequired[Any]
    Join_Frame: NotRequired[int]
    Leave_Frame: NotRequired[int | None]


class TeamReport(TypedDict, total=False):
    """Aggregated team statistics under team_data[team]."""

    Players: int
    Score: int
    AVG_Score: int | None
    AVG_Boost: int | None
    Goals: int
    Assists: int
    Saves: int
    Shots: int
    Points_Score: int
    Play_Score: int
    Frames_Closest: int | None
    Closest_Percent: int | None
    Orange_Zone_Time: float | None
    Blue_Zone_Time: float | None
    Midfield_Time: float | None
    Air_Time: float | None
    Attack_Time: float | None
    Defense_Time: float | None
    Posession: float | None
    Kickoff_Wins: int | None


# ============================================================
# ERROR REPORTING: distinguish "0 results" from "couldn't analyze"
# ============================================================


class AnalysisWarning(TypedDict):
    """A non-fatal issue detected during reconstruction or analysis."""

    module: str  # which module generated this warning
    code: str  # machine-readable code, e.g. "UNRESOLVED_BOOST_BINDING"
    message: str  # human-readable explanation
    impact: str  # what feature is degraded


# ============================================================
# MATCH REPORT: the top-level response from the orchestrator
# ============================================================


class MatchReport(TypedDict):
    metadata: dict[str, Any]
    player_data: dict[str, dict[str, PlayerReport]]  # team -> key -> player
    team_data: dict[str, TeamReport]
    extra_data: dict[str, Any]
