"""
Shared helpers for building synthetic decoded-replay documents.

Entity ids used throughout the tests:
    1      game event (clock)
    2      ball
    3, 4   team markers (blue, orange)
    10, 11 player identities (blue "Alpha", orange "Bravo")
    20, 21 cars driven by 10 and 11
    30, 31 boost components attached to 20 and 21
"""

from __future__ import annotations

from typing import Any

import pytest

from rlsight.core.config import reset_config
from rlsight.core.constants import (
    ATTR_BOOST_AMOUNT,
    ATTR_CAMERA_OWNER,
    ATTR_CAMERA_SETTINGS,
    ATTR_COMPONENT_VEHICLE,
    ATTR_HIT_TEAM,
    ATTR_LOADOUTS,
    ATTR_MATCH_ASSISTS,
    ATTR_MATCH_GOALS,
    ATTR_MATCH_SAVES,
    ATTR_MATCH_SCORE,
    ATTR_MATCH_SHOTS,
    ATTR_PLAYER_NAME,
    ATTR_PLAYER_TEAM,
    ATTR_RB_STATE,
    ATTR_SECONDS_REMAINING,
    ATTR_UNIQUE_ID,
    ATTR_UNIT_OWNER,
    CLASS_KEY,
    NAME_KEY,
    EntityClass,
)

GAME_EVENT = "1"
BALL = "2"
BLUE_MARKER = "3"
ORANGE_MARKER = "4"
BLUE_PRI = "10"
ORANGE_PRI = "11"
BLUE_CAR = "20"
ORANGE_CAR = "21"
BLUE_BOOST = "30"
ORANGE_BOOST = "31"


# =============================================================================
# Payload builders
# =============================================================================


def tagged(value: Any) -> dict:
    return {"Value": value}


def ref(entity_id: str | int) -> dict:
    return {"Value": {"Int": int(entity_id)}}


def rb_state(x: float, y: float, z: float, rotation=(0.0, 0.0, 0.0)) -> dict:
    return {ATTR_RB_STATE: tagged({"Position": [x, y, z], "Rotation": list(rotation)})}


def clock(seconds: int) -> dict:
    return {ATTR_SECONDS_REMAINING: tagged(seconds)}


def game_event(seconds: int) -> dict:
    return {CLASS_KEY: "TAGame.GameEvent_Soccar_TA", **clock(seconds)}


def ball(x: float, y: float, z: float) -> dict:
    return {CLASS_KEY: EntityClass.BALL.value, **rb_state(x, y, z)}


def hit(team: int) -> dict:
    return {ATTR_HIT_TEAM: tagged(team)}


def team_marker(team: int) -> dict:
    return {CLASS_KEY: EntityClass.TEAM_MARKER.value, NAME_KEY: f"Archetypes.Teams.Team{team}"}


def identity(
    name: str,
    marker: str | None = None,
    unique_id: str | None = None,
    score: int = 0,
    goals: int = 0,
    shots: int = 0,
    assists: int = 0,
    saves: int = 0,
    car: str | None = None,
) -> dict:
    payload: dict[str, Any] = {
        CLASS_KEY: EntityClass.PLAYER_IDENTITY.value,
        ATTR_PLAYER_NAME: tagged(name),
        ATTR_MATCH_SCORE: tagged(score),
        ATTR_MATCH_GOALS: tagged(goals),
        ATTR_MATCH_SHOTS: tagged(shots),
        ATTR_MATCH_ASSISTS: tagged(assists),
        ATTR_MATCH_SAVES: tagged(saves),
    }
    if marker is not None:
        payload[ATTR_PLAYER_TEAM] = ref(marker)
    if unique_id is not None:
        payload[ATTR_UNIQUE_ID] = tagged({"Remote": tagged(unique_id)})
    if car is not None:
        payload[ATTR_LOADOUTS] = tagged({"Loadout1": tagged({"Body": {"Name": car}})})
    return payload


def unit(owner: str, x: float = 0.0, y: float = 0.0, z: float = 17.0) -> dict:
    return {
        CLASS_KEY: EntityClass.PLAYER_UNIT.value,
        ATTR_UNIT_OWNER: ref(owner),
        **rb_state(x, y, z),
    }


def boost(level: int, vehicle: str | None = None) -> dict:
    payload: dict[str, Any] = {ATTR_BOOST_AMOUNT: tagged(level)}
    if vehicle is not None:
        payload[CLASS_KEY] = "TAGame.CarComponent_Boost_TA"
        payload[ATTR_COMPONENT_VEHICLE] = ref(vehicle)
    return payload


def camera(owner: str, settings: dict) -> dict:
    return {
        CLASS_KEY: EntityClass.CAMERA.value,
        ATTR_CAMERA_OWNER: ref(owner),
        ATTR_CAMERA_SETTINGS: tagged(settings),
    }


def frame(spawned: dict | None = None, updated: dict | None = None, destroyed=None) -> dict:
    result: dict[str, Any] = {}
    if spawned:
        result["Spawned"] = spawned
    if updated:
        result["Updated"] = updated
    if destroyed:
        result["Destroyed"] = list(destroyed)
    return result


def goal(frame_index: int, name: str, team: int) -> dict:
    return {"frame": tagged(frame_index), "PlayerName": tagged(name), "PlayerTeam": tagged(str(team))}


def document(frames: list[dict], goals: list[dict] | None = None, metadata: dict | None = None) -> dict:
    return {
        "Metadata": metadata if metadata is not None else {"Team0Score": tagged(0), "Team1Score": tagged(0)},
        "Goals": goals or [],
        "Frames": frames,
    }


def roster_spawns(clock_seconds: int = 300, ball_at=(0.0, 0.0, 93.0)) -> dict:
    """Frame-0 spawn set: clock, ball, both teams, one car each with boost."""
    return {
        GAME_EVENT: game_event(clock_seconds),
        BALL: ball(*ball_at),
        BLUE_MARKER: team_marker(0),
        ORANGE_MARKER: team_marker(1),
        BLUE_PRI: identity("Alpha", BLUE_MARKER, unique_id="steam-alpha", score=420, goals=2, shots=3, saves=1),
        ORANGE_PRI: identity("Bravo", ORANGE_MARKER, unique_id="steam-bravo", score=180, goals=1, shots=2),
        BLUE_CAR: unit(BLUE_PRI, 0.0, -2500.0),
        ORANGE_CAR: unit(ORANGE_PRI, 0.0, 2500.0),
        BLUE_BOOST: boost(85, BLUE_CAR),
        ORANGE_BOOST: boost(85, ORANGE_CAR),
    }


def three_frame_document() -> dict:
    """
    Ball crosses from the blue half to the orange half over three clock
    seconds while both players close in on it from their own halves.
    """
    frames = [
        frame(
            spawned={
                GAME_EVENT: game_event(300),
                BALL: ball(0.0, -100.0, 17.0),
                BLUE_MARKER: team_marker(0),
                ORANGE_MARKER: team_marker(1),
                BLUE_PRI: identity("Alpha", BLUE_MARKER, unique_id="steam-alpha", score=100),
                ORANGE_PRI: identity("Bravo", ORANGE_MARKER, unique_id="steam-bravo", score=50),
                BLUE_CAR: unit(BLUE_PRI, 0.0, -300.0),
                ORANGE_CAR: unit(ORANGE_PRI, 0.0, 400.0),
            }
        ),
        frame(
            updated={
                GAME_EVENT: clock(299),
                BALL: {**rb_state(0.0, 0.0, 17.0), **hit(0)},
                BLUE_CAR: rb_state(0.0, -250.0, 17.0),
                ORANGE_CAR: rb_state(0.0, 350.0, 17.0),
            }
        ),
        frame(
            updated={
                GAME_EVENT: clock(298),
                BALL: rb_state(0.0, 150.0, 17.0),
                BLUE_CAR: rb_state(0.0, -200.0, 17.0),
                ORANGE_CAR: rb_state(0.0, 300.0, 17.0),
            }
        ),
    ]
    return document(frames)


def goal_document() -> dict:
    """
    Six frames with an opening kickoff, one blue goal at frame 3 and the
    restart that follows it. The ball is not updated on the goal frame.
    """
    frames = [
        frame(spawned=roster_spawns(300, ball_at=(0.0, -50.0, 93.0))),
        frame(updated={GAME_EVENT: clock(299), BALL: rb_state(0.0, 500.0, 93.0), BLUE_BOOST: boost(255)}),
        frame(updated={GAME_EVENT: clock(298), BALL: {**rb_state(0.0, 5000.0, 300.0), **hit(0)}}),
        frame(),
        frame(updated={GAME_EVENT: clock(297), BALL: rb_state(0.0, 0.0, 93.0)}),
        frame(updated={GAME_EVENT: clock(296), BALL: {**rb_state(0.0, -400.0, 93.0), **hit(1)}}),
    ]
    metadata = {"Team0Score": tagged(1), "Team1Score": tagged(0), "NumFrames": tagged(6)}
    return document(frames, goals=[goal(3, "Alpha", 0)], metadata=metadata)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    """Keep user config files and RLSIGHT_* variables out of every test."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / ".config"))
    for var in (
        "RLSIGHT_LOG_LEVEL",
        "RLSIGHT_LOG_FILE",
        "RLSIGHT_ZONE_THRESHOLD",
        "RLSIGHT_KICKOFF_DELAY",
        "RLSIGHT_OPENING_KICKOFF_SECOND",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def e2e_document() -> dict:
    return three_frame_document()
