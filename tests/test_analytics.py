"""Tests for the ReplayAnalyzer on synthetic replays."""

from __future__ import annotations

import pytest
from conftest import (
    BLUE_CAR,
    BLUE_MARKER,
    BLUE_PRI,
    ORANGE_PRI,
    ball,
    document,
    frame,
    goal_document,
    identity,
    three_frame_document,
    unit,
)

from rlsight.analysis.analytics import ReplayAnalyzer, ball_position_at
from rlsight.analysis.models import TeamMatchStats
from rlsight.core.config import AnalysisConfig
from rlsight.core.constants import Team
from rlsight.core.parser import parse_replay
from rlsight.core.telemetry import PositionSample


def _analyze(doc, config=None):
    return ReplayAnalyzer(parse_replay(doc), config).analyze()


class TestPlayers:
    """Per-player statistics."""

    def test_scoreboard_and_points(self):
        analysis = _analyze(goal_document())
        alpha = analysis.players[BLUE_PRI]
        assert alpha.key == "steam-alpha"
        assert alpha.team is Team.BLUE
        assert alpha.points_score == 170
        assert alpha.play_score == 250

    def test_custom_points_weights(self):
        config = AnalysisConfig(points_weights={"Goals": 100})
        analysis = _analyze(goal_document(), config)
        assert analysis.players[BLUE_PRI].points_score == 200

    def test_average_boost(self):
        analysis = _analyze(goal_document())
        assert analysis.players[BLUE_PRI].avg_boost == 67
        assert analysis.players[ORANGE_PRI].avg_boost == 33

    def test_player_zones(self):
        analysis = _analyze(goal_document())
        alpha = analysis.players[BLUE_PRI]
        assert alpha.zones.blue_zone_time == 5.0
        assert alpha.defending_half_time == 5.0
        assert alpha.attacking_half_time == 0.0

    def test_player_without_team_is_left_out(self):
        frames = [frame(spawned={BLUE_PRI: identity("Loner", "99"), BLUE_CAR: unit(BLUE_PRI)})]
        analysis = _analyze(document(frames))
        assert analysis.players == {}
        assert "PLAYER_TEAM_UNKNOWN" in [w["code"] for w in analysis.warnings]


class TestMatchStatistics:
    """Kickoffs, possession, goals and outcome."""

    def test_kickoffs(self):
        analysis = _analyze(goal_document())
        assert analysis.kickoffs.total == 2
        assert analysis.teams[Team.BLUE].kickoff_wins == 1
        assert analysis.teams[Team.ORANGE].kickoff_wins == 1

    def test_ambiguous_kickoff_only_drops_kickoffs(self):
        analysis = _analyze(three_frame_document())
        assert analysis.kickoffs is None
        assert "Kickoff_Wins" in analysis.unavailable
        assert analysis.teams[Team.BLUE].kickoff_wins is None
        assert analysis.teams[Team.BLUE].possession == 100.0

    def test_possession(self):
        analysis = _analyze(goal_document())
        assert analysis.teams[Team.BLUE].possession == 75.0
        assert analysis.teams[Team.ORANGE].possession == 25.0

    def test_goal_enrichment_falls_back_to_earlier_ball_sample(self):
        analysis = _analyze(goal_document())
        (summary,) = analysis.goals
        assert summary.second == 298
        assert summary.position == (0.0, 5000.0, 300.0)

    def test_game_winning_goal_and_mvp(self):
        analysis = _analyze(goal_document())
        assert analysis.gwg.scorer_name == "Alpha"
        assert analysis.gwg_key == "steam-alpha"
        assert analysis.mvp.candidates == [BLUE_PRI]
        assert analysis.players[BLUE_PRI].mvp
        assert not analysis.players[ORANGE_PRI].mvp

    def test_match_time(self):
        assert _analyze(goal_document()).match_time == 4


class TestTeams:
    """Aggregation over each team's actual players."""

    def test_team_totals(self):
        analysis = _analyze(goal_document())
        blue = analysis.teams[Team.BLUE]
        assert blue.players == 1
        assert blue.score == 420
        assert blue.avg_score == 420
        assert blue.avg_boost == 67
        assert blue.points_score == 170
        assert blue.blue_zone_time == 5.0

    def test_ball_attack_and_defence_time(self):
        analysis = _analyze(goal_document())
        assert analysis.teams[Team.BLUE].attack_time == 2.5
        assert analysis.teams[Team.ORANGE].defense_time == 2.5

    def test_team_without_players_has_no_average_score(self):
        assert TeamMatchStats(team=Team.ORANGE).avg_score is None

    def test_proximity_shares(self):
        analysis = _analyze(three_frame_document())
        assert analysis.teams[Team.BLUE].frames_closest == 2
        assert analysis.teams[Team.ORANGE].closest_percent == 33


class TestWithoutClock:
    """Clock-dependent statistics are marked unavailable."""

    def test_unavailable_statistics(self):
        frames = [
            frame(
                spawned={
                    "2": ball(0, 100, 93),
                    BLUE_MARKER: {"Class": "TAGame.Team_Soccar_TA", "Name": "Team0"},
                    BLUE_PRI: identity("Alpha", BLUE_MARKER),
                    BLUE_CAR: unit(BLUE_PRI),
                }
            )
        ]
        analysis = _analyze(document(frames))
        assert set(analysis.unavailable) >= {"AVG_Boost", "Closest_Percent", "Kickoff_Wins"}
        assert analysis.players[BLUE_PRI].avg_boost is None
        assert "ZONE_SCALE_FALLBACK" in [w["code"] for w in analysis.warnings]
        assert analysis.ball_zones.half_time(Team.ORANGE) == 1.0
        assert analysis.teams[Team.ORANGE].avg_score is None


def test_ball_position_at_uses_latest_earlier_sample():
    samples = [PositionSample("ball", 0.0, float(f), 0.0, 0.0, 0.0, 0.0, f) for f in (0, 5, 9)]
    assert ball_position_at(samples, 7) == (0.0, 5.0, 0.0)
    assert ball_position_at(samples, 9) == (0.0, 9.0, 0.0)
    assert ball_position_at([], 3) is None


@pytest.mark.parametrize("team", list(Team))
def test_every_team_has_stats(team):
    analysis = _analyze(three_frame_document())
    assert analysis.teams[team].players == 1
