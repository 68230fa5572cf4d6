"""
Replay Analysis Orchestrator - main pipeline for processing one replay.

Parses the decoded document, runs the analytics engine, and serializes the
MatchAnalysis into the report shape locked in pipeline/contract.py.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from rlsight.analysis.analytics import ReplayAnalyzer
from rlsight.analysis.models import (
    GoalSummary,
    MatchAnalysis,
    PlayerMatchStats,
    TeamMatchStats,
    ZoneOccupancy,
)
from rlsight.core.config import RLSightConfig
from rlsight.core.constants import Team
from rlsight.core.parser import ReplayParser
from rlsight.core.schemas import GoalRecord, MatchReport, PlayerReport, TeamReport
from rlsight.core.utils import PerformanceMonitor
from rlsight.pipeline.contract import validate_result

logger = logging.getLogger(__name__)


def _zone_value(zones: ZoneOccupancy | None, attribute: str) -> float | None:
    return getattr(zones, attribute) if zones is not None else None


class ReplayOrchestrator:
    """
    Orchestrates the complete replay analysis pipeline.

    Handles:
    - Document validation and frame reconstruction
    - Analysis execution
    - Result serialization into the report contract

    One orchestrator may analyze many replays one after another; no state
    survives between calls.

    Without a config the built-in defaults apply. Callers that want config
    files and RLSIGHT_* variables pass load_config() or get_config().
    """

    def __init__(self, config: RLSightConfig | None = None, *, validate: bool = True):
        self.config = config or RLSightConfig()
        self._validate = validate

    def analyze(self, document: Mapping[str, Any]) -> dict:
        """
        Execute the complete analysis pipeline for a decoded replay.

        Args:
            document: Decoded replay with Metadata, Goals and Frames sections

        Returns:
            Report dict (metadata, player_data, team_data, extra_data)

        Raises:
            StructuralError: A required section is missing or malformed
            DataIntegrityError: A boost reading is out of range
        """
        with PerformanceMonitor("Replay analysis"):
            replay = ReplayParser(document, self.config.analysis).parse()
            analysis = ReplayAnalyzer(replay, self.config.analysis).analyze()
            report = self.build_report(analysis)

        if self._validate:
            errors = validate_result(report)
            for error in errors:
                logger.warning(f"Report contract: {error}")
        return report

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def build_report(self, analysis: MatchAnalysis) -> MatchReport:
        """Serialize a MatchAnalysis into the report contract."""
        metadata = dict(analysis.metadata)
        metadata["MatchTime"] = analysis.match_time

        player_data: dict[str, dict[str, PlayerReport]] = {team.label: {} for team in Team}
        for player in analysis.players.values():
            player_data[player.team.label][player.key] = self._player_report(player, analysis)

        team_data = {team.label: self._team_report(analysis.teams[team]) for team in Team}

        return MatchReport(
            metadata=metadata,
            player_data=player_data,
            team_data=team_data,
            extra_data=self._extra_data(analysis),
        )

    @staticmethod
    def _player_report(player: PlayerMatchStats, analysis: MatchAnalysis) -> PlayerReport:
        zones = player.zones
        return PlayerReport(
            ID=player.key,
            Name=player.name,
            Team=player.team.label,
            Score=player.score,
            Goals=player.goals,
            Shots=player.shots,
            Assists=player.assists,
            Saves=player.saves,
            Points_Score=player.points_score,
            Play_Score=player.play_score,
            AVG_Boost=player.avg_boost,
            Attacking_Half_Time=player.attacking_half_time,
            Defending_Half_Time=player.defending_half_time,
            Orange_Zone_Time=_zone_value(zones, "orange_zone_time"),
            Blue_Zone_Time=_zone_value(zones, "blue_zone_time"),
            Midfield_Time=_zone_value(zones, "midfield_time"),
            Airtime_Low=_zone_value(zones, "airtime_low_time"),
            Airtime_Medium=_zone_value(zones, "airtime_medium_time"),
            Airtime_High=_zone_value(zones, "airtime_high_time"),
            Frames_Closest=player.frames_closest,
            Closest_Percent=player.closest_percent,
            MVP=player.mvp,
            Car=player.car,
            Camera=player.camera,
            Join_Frame=player.join_frame,
            Leave_Frame=player.leave_frame,
        )

    @staticmethod
    def _team_report(stats: TeamMatchStats) -> TeamReport:
        return TeamReport(
            Players=stats.players,
            Score=stats.score,
            AVG_Score=stats.avg_score,
            AVG_Boost=stats.avg_boost,
            Goals=stats.goals,
            Assists=stats.assists,
            Saves=stats.saves,
            Shots=stats.shots,
            Points_Score=stats.points_score,
            Play_Score=stats.play_score,
            Frames_Closest=stats.frames_closest,
            Closest_Percent=stats.closest_percent,
            Orange_Zone_Time=stats.orange_zone_time,
            Blue_Zone_Time=stats.blue_zone_time,
            Midfield_Time=stats.midfield_time,
            Air_Time=stats.air_time,
            Attack_Time=stats.attack_time,
            Defense_Time=stats.defense_time,
            Posession=stats.possession,
            Kickoff_Wins=stats.kickoff_wins,
        )

    @staticmethod
    def _goal_record(goal: GoalSummary) -> GoalRecord:
        position = None
        if goal.position is not None:
            x, y, z = goal.position
            position = {"x": x, "y": y, "z": z}
        return GoalRecord(
            frame=goal.frame,
            PlayerName=goal.scorer_name,
            PlayerTeam=int(goal.scorer_team),
            Second=goal.second,
            Position=position,
        )

    def _extra_data(self, analysis: MatchAnalysis) -> dict[str, Any]:
        ball = analysis.ball_zones
        possession = analysis.possession
        mvp = analysis.mvp

        extra: dict[str, Any] = {
            "Overtime": analysis.overtime,
            "Kickoffs": analysis.kickoffs.total if analysis.kickoffs is not None else None,
            "Ball_Orange_Half": ball.half_time(Team.ORANGE) if ball is not None else None,
            "Ball_Blue_Half": ball.half_time(Team.BLUE) if ball is not None else None,
            "Ball_Orange_Zone": _zone_value(ball, "orange_zone_time"),
            "Ball_Blue_Zone": _zone_value(ball, "blue_zone_time"),
            "Ball_Midfield": _zone_value(ball, "midfield_time"),
            "Ball_Airtime_Low": _zone_value(ball, "airtime_low_time"),
            "Ball_Airtime_Medium": _zone_value(ball, "airtime_medium_time"),
            "Ball_Airtime_High": _zone_value(ball, "airtime_high_time"),
            "Possession": {
                team.label: possession.percent(team) if possession is not None else None
                for team in Team
            },
            "GWG_Name": analysis.gwg.scorer_name if analysis.gwg is not None else None,
            "GWG_ID": analysis.gwg_key,
            "MVP_Name": None,
            "MVP_ID": None,
            "MVP_Tied": False,
            "MVP_Candidates": [],
            "Goals": [self._goal_record(goal) for goal in analysis.goals],
            "unavailable": dict(analysis.unavailable),
            "warnings": list(analysis.warnings),
        }

        if mvp is not None:
            candidates = [analysis.players[identity_id] for identity_id in mvp.candidates]
            extra["MVP_Tied"] = mvp.tied
            extra["MVP_Candidates"] = [p.key for p in candidates]
            # A tie has no single MVP
            if not mvp.tied:
                extra["MVP_Name"] = candidates[0].name
                extra["MVP_ID"] = candidates[0].key

        extra.update(analysis.facts)
        return extra


def analyze_replay(document: Mapping[str, Any], config: RLSightConfig | None = None) -> dict:
    """Convenience function: decoded replay document in, report dict out."""
    return ReplayOrchestrator(config).analyze(document)
