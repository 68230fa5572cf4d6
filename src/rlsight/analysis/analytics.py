"""
Replay Analytics Engine

Consumes a parsed ReplayData (telemetry series, goals, metadata) and derives
player, team and match statistics. The engine never sees the entity store;
everything it needs was captured by the telemetry extractor.

Statistics that cannot be computed are left as None on the models and
listed in MatchAnalysis.unavailable with the reason, so the report never
shows a zero that looks like a real result.
"""

from __future__ import annotations

import bisect
import logging

from rlsight.analysis.boost import compute_boost
from rlsight.analysis.clock import ClockAligner
from rlsight.analysis.kickoffs import compute_kickoffs
from rlsight.analysis.models import (
    GoalSummary,
    MatchAnalysis,
    PlayerMatchStats,
    PossessionShare,
    TeamMatchStats,
    ZoneOccupancy,
)
from rlsight.analysis.outcome import find_game_winning_goal, find_mvp
from rlsight.analysis.possession import compute_possession, dead_ball_windows
from rlsight.analysis.proximity import closest_percent, compute_proximity
from rlsight.analysis.zones import compute_zone_occupancy
from rlsight.core.config import AnalysisConfig
from rlsight.core.constants import BALL_REF, Team
from rlsight.core.errors import KickoffAmbiguousError
from rlsight.core.parser import ReplayData
from rlsight.core.schemas import AnalysisWarning
from rlsight.core.telemetry import PlayerProfile, PositionSample
from rlsight.core.utils import PerformanceMonitor

logger = logging.getLogger(__name__)

NO_CLOCK = "replay carries no clock samples"


def points_score(profile: PlayerProfile, weights: dict[str, int]) -> int:
    """Scoreboard points explained by goals, assists, saves and shots."""
    return sum(profile.scoreboard.get(stat, 0) * weight for stat, weight in weights.items())


def ball_position_at(ball: list[PositionSample], frame: int) -> tuple[float, float, float] | None:
    """Ball position at ``frame``, else the latest earlier sample."""
    frames = [s.frame for s in ball]
    index = bisect.bisect_right(frames, frame) - 1
    if index < 0:
        return None
    return ball[index].position


class ReplayAnalyzer:
    """Derives match statistics from parsed replay data.

    Usage:
        replay = ReplayParser(document).parse()
        analysis = ReplayAnalyzer(replay).analyze()
        analysis.teams[Team.BLUE].possession

    Every accumulator lives on the MatchAnalysis being built, so one analyzer
    per replay shares no state with any other.
    """

    def __init__(self, replay: ReplayData, config: AnalysisConfig | None = None):
        self.data = replay
        self.config = config or AnalysisConfig()
        self.clock = ClockAligner.from_samples(replay.telemetry.clock)

    def analyze(self) -> MatchAnalysis:
        """Run every analytic and fold the results into team aggregates."""
        telemetry = self.data.telemetry
        analysis = MatchAnalysis(
            metadata=dict(self.data.metadata),
            players={},
            teams={team: TeamMatchStats(team=team) for team in Team},
            overtime=self.clock.overtime,
            match_time=max(len(self.clock) - 1, 0),
            facts=dict(telemetry.facts),
            warnings=list(telemetry.warnings),
        )

        with PerformanceMonitor("Replay analytics"):
            self._build_players(analysis)
            by_second = self.clock.bucket_by_second(telemetry.positions)

            self._record_boost(analysis)
            self._record_zones(analysis)
            self._record_proximity(analysis, by_second)
            self._record_kickoffs(analysis, by_second)
            self._record_possession(analysis)
            self._record_goals(analysis)
            self._record_outcome(analysis)
            self._record_teams(analysis)

        if analysis.unavailable:
            logger.warning(f"Unavailable statistics: {analysis.unavailable}")
        return analysis

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------

    def _build_players(self, analysis: MatchAnalysis) -> None:
        for identity_id, profile in self.data.telemetry.playing_profiles().items():
            if profile.team is None:
                message = f"Player {profile.name or identity_id} has no resolvable team"
                logger.warning(message)
                analysis.warnings.append(
                    AnalysisWarning(
                        module="analytics",
                        code="PLAYER_TEAM_UNKNOWN",
                        message=message,
                        impact="player left out of player and team data",
                    )
                )
                continue

            board = profile.scoreboard
            analysis.players[identity_id] = PlayerMatchStats(
                identity_id=identity_id,
                key=profile.key,
                name=profile.name,
                team=profile.team,
                score=board.get("Score", 0),
                goals=board.get("Goals", 0),
                shots=board.get("Shots", 0),
                assists=board.get("Assists", 0),
                saves=board.get("Saves", 0),
                points_score=points_score(profile, self.config.points_weights),
                car=profile.car,
                camera=profile.camera,
                join_frame=profile.join_frame,
                leave_frame=profile.leave_frame,
            )
        logger.info(f"Analyzing {len(analysis.players)} players")

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    def _record_boost(self, analysis: MatchAnalysis) -> None:
        if not self.clock:
            analysis.unavailable["AVG_Boost"] = NO_CLOCK
            return
        averages = compute_boost(
            self.data.telemetry.resources,
            analysis.players,
            self.clock,
            self.config.boost_max,
        )
        for identity_id, avg in averages.items():
            analysis.players[identity_id].avg_boost = avg

    def _record_zones(self, analysis: MatchAnalysis) -> None:
        match_frames = len(self.clock)
        if not match_frames:
            match_frames = self.data.frame_count
            analysis.warnings.append(
                AnalysisWarning(
                    module="analytics",
                    code="ZONE_SCALE_FALLBACK",
                    message="No clock samples; zone times are scaled by frame count",
                    impact="zone and airtime values are in frames, not seconds",
                )
            )

        occupancy = compute_zone_occupancy(
            self.data.telemetry.positions_frame(),
            match_frames,
            threshold=self.config.zone_threshold,
            bounds=self.config.height_bounds,
        )
        for identity_id, player in analysis.players.items():
            player.zones = occupancy.get(identity_id)
        analysis.ball_zones = occupancy.get(BALL_REF)

    def _record_proximity(self, analysis: MatchAnalysis, by_second) -> None:
        if not self.clock:
            analysis.unavailable["Closest_Percent"] = NO_CLOCK
            return
        ticks = compute_proximity(by_second, analysis.players)
        analysis.total_closest = sum(ticks.values())
        for identity_id, player in analysis.players.items():
            player.frames_closest = ticks.get(identity_id, 0)
            player.closest_percent = closest_percent(player.frames_closest, analysis.total_closest)

    def _record_kickoffs(self, analysis: MatchAnalysis, by_second) -> None:
        if not self.clock:
            analysis.unavailable["Kickoff_Wins"] = NO_CLOCK
            return
        try:
            analysis.kickoffs = compute_kickoffs(self.data.goals, self.clock, by_second, self.config)
        except KickoffAmbiguousError as e:
            logger.warning(f"Kickoff statistics unavailable: {e}")
            analysis.unavailable["Kickoff_Wins"] = str(e)

    def _record_possession(self, analysis: MatchAnalysis) -> None:
        telemetry = self.data.telemetry
        windows = dead_ball_windows(self.data.goals, self.clock, self.clock.overtime)
        share = compute_possession(telemetry.possession, telemetry.frame_count, windows)
        if share.counted == 0:
            analysis.unavailable["Posession"] = "ball was never touched"
        analysis.possession = share

    def _record_goals(self, analysis: MatchAnalysis) -> None:
        ball = self.data.telemetry.ball_positions()
        for goal in self.data.goals:
            analysis.goals.append(
                GoalSummary(
                    frame=goal.frame,
                    scorer_name=goal.scorer_name,
                    scorer_team=goal.scorer_team,
                    second=self.clock.seconds_at(goal.frame) if self.clock else None,
                    position=ball_position_at(ball, goal.frame),
                )
            )

    def _record_outcome(self, analysis: MatchAnalysis) -> None:
        gwg = find_game_winning_goal(self.data.goals)
        if gwg is not None:
            analysis.gwg = next((g for g in analysis.goals if g.frame == gwg.frame), None)
            analysis.gwg_key = next(
                (p.key for p in analysis.players.values() if p.name == gwg.scorer_name),
                None,
            )

        analysis.mvp = find_mvp(analysis.players)
        if analysis.mvp is None:
            analysis.unavailable["MVP"] = "no players"
            return
        for identity_id in analysis.mvp.candidates:
            analysis.players[identity_id].mvp = True
        if analysis.mvp.tied:
            logger.info(f"MVP tied between {analysis.mvp.candidates} at {analysis.mvp.score}")

    # ------------------------------------------------------------------
    # Team aggregation
    # ------------------------------------------------------------------

    def _record_teams(self, analysis: MatchAnalysis) -> None:
        for team, stats in analysis.teams.items():
            players = analysis.players_on(team)
            stats.players = len(players)
            stats.score = sum(p.score for p in players)
            stats.goals = sum(p.goals for p in players)
            stats.assists = sum(p.assists for p in players)
            stats.saves = sum(p.saves for p in players)
            stats.shots = sum(p.shots for p in players)
            stats.points_score = sum(p.points_score for p in players)
            stats.play_score = sum(p.play_score for p in players)

            boosts = [p.avg_boost for p in players if p.avg_boost is not None]
            if boosts:
                stats.avg_boost = round(sum(boosts) / len(boosts))

            if "Closest_Percent" not in analysis.unavailable:
                stats.frames_closest = sum(p.frames_closest or 0 for p in players)
                stats.closest_percent = closest_percent(stats.frames_closest, analysis.total_closest)

            zones = [p.zones for p in players if p.zones is not None]
            if zones:
                stats.orange_zone_time = round(sum(z.orange_zone_time for z in zones), 2)
                stats.blue_zone_time = round(sum(z.blue_zone_time for z in zones), 2)
                stats.midfield_time = round(sum(z.midfield_time for z in zones), 2)
                stats.air_time = round(sum(z.airtime_low_time for z in zones), 2)

            self._fold_ball_time(stats, analysis.ball_zones)
            self._fold_possession(stats, analysis.possession)
            if analysis.kickoffs is not None:
                stats.kickoff_wins = analysis.kickoffs.wins_for(team)

    @staticmethod
    def _fold_ball_time(stats: TeamMatchStats, ball: ZoneOccupancy | None) -> None:
        if ball is None:
            return
        # A team attacks while the ball is in the opponent's half
        stats.attack_time = ball.half_time(stats.team.opponent)
        stats.defense_time = ball.half_time(stats.team)

    @staticmethod
    def _fold_possession(stats: TeamMatchStats, share: PossessionShare | None) -> None:
        if share is None:
            return
        stats.possession = share.percent(stats.team)


def analyze(replay: ReplayData, config: AnalysisConfig | None = None) -> MatchAnalysis:
    """Convenience wrapper around ReplayAnalyzer."""
    return ReplayAnalyzer(replay, config).analyze()


__all__ = ["ReplayAnalyzer", "analyze", "ball_position_at", "points_score"]
