"""
RLSight Output Contract: the single source of truth.

Defines the exact structure that ReplayOrchestrator.analyze() returns.
Every field name, nesting level, and type is locked here.

Rules:
  1. The orchestrator MUST produce output matching RESULT_CONTRACT.
  2. Report writers MUST read fields using the paths defined here.
  3. Any new field goes here FIRST (and in core/schemas.py), then gets
     wired through the analyzer and orchestrator.
  4. A statistic that could not be computed is None and is named in
     extra_data["unavailable"]; None is always type-valid.

Validated by: tests/test_contract.py (runtime schema check)
"""

from __future__ import annotations

NUMBER = (int, float)

# ─── Top-level result shape ───────────────────────────────────────────
RESULT_CONTRACT: dict = {
    "metadata": {
        "Team0Score": NUMBER,
        "Team1Score": NUMBER,
        "NumFrames": NUMBER,
        "MatchTime": int,
    },
    "player_data": {
        "orange": dict,  # keyed by player key -> PLAYER_CONTRACT
        "blue": dict,
    },
    "team_data": {
        "orange": dict,  # -> TEAM_CONTRACT
        "blue": dict,
    },
    "extra_data": {
        "Overtime": bool,
        "Kickoffs": int,
        "Ball_Orange_Half": NUMBER,
        "Ball_Blue_Half": NUMBER,
        "Ball_Orange_Zone": NUMBER,
        "Ball_Blue_Zone": NUMBER,
        "Ball_Midfield": NUMBER,
        "Ball_Airtime_Low": NUMBER,
        "Ball_Airtime_Medium": NUMBER,
        "Ball_Airtime_High": NUMBER,
        "Possession": dict,
        "GWG_Name": str,
        "GWG_ID": str,
        "MVP_Name": str,
        "MVP_ID": str,
        "MVP_Tied": bool,
        "MVP_Candidates": list,
        "Goals": list,
        "unavailable": dict,
        "warnings": list,
    },
}

# ─── Per-player shape (keyed by platform id, else identity id) ───────
PLAYER_CONTRACT: dict = {
    "ID": str,
    "Name": str,
    "Team": str,
    # ── scoreboard ──
    "Score": int,
    "Goals": int,
    "Shots": int,
    "Assists": int,
    "Saves": int,
    "Points_Score": int,
    "Play_Score": int,
    # ── derived ──
    "AVG_Boost": int,
    "Attacking_Half_Time": NUMBER,
    "Defending_Half_Time": NUMBER,
    "Orange_Zone_Time": NUMBER,
    "Blue_Zone_Time": NUMBER,
    "Midfield_Time": NUMBER,
    "Airtime_Low": NUMBER,
    "Airtime_Medium": NUMBER,
    "Airtime_High": NUMBER,
    "Frames_Closest": int,
    "Closest_Percent": int,
    "MVP": bool,
}

# ─── Per-team aggregate shape ─────────────────────────────────────────
TEAM_CONTRACT: dict = {
    "Players": int,
    "Score": int,
    "AVG_Score": int,
    "AVG_Boost": int,
    "Goals": int,
    "Assists": int,
    "Saves": int,
    "Shots": int,
    "Points_Score": int,
    "Play_Score": int,
    "Frames_Closest": int,
    "Closest_Percent": int,
    "Orange_Zone_Time": NUMBER,
    "Blue_Zone_Time": NUMBER,
    "Midfield_Time": NUMBER,
    "Air_Time": NUMBER,
    "Attack_Time": NUMBER,
    "Defense_Time": NUMBER,
    "Posession": NUMBER,
    "Kickoff_Wins": int,
}

TEAMS = ("orange", "blue")


def validate_player(player_data: dict, errors: list[str] | None = None) -> list[str]:
    """Validate a player dict against the contract. Returns list of errors."""
    if errors is None:
        errors = []
    _validate_dict(player_data, PLAYER_CONTRACT, "player", errors)
    return errors


def validate_team(team_data: dict, errors: list[str] | None = None) -> list[str]:
    """Validate a team aggregate dict against the contract. Returns list of errors."""
    if errors is None:
        errors = []
    _validate_dict(team_data, TEAM_CONTRACT, "team", errors)
    return errors


def validate_result(result: dict) -> list[str]:
    """Validate a full orchestrator result dict. Returns list of errors."""
    errors: list[str] = []
    if not isinstance(result, dict):
        return [f"result must be dict, got {type(result).__name__}"]

    _validate_dict(result, RESULT_CONTRACT, "result", errors)

    for team in TEAMS:
        players = result.get("player_data", {}).get(team, {})
        if isinstance(players, dict):
            for key, pdata in players.items():
                _validate_dict(pdata, PLAYER_CONTRACT, f"player_data.{team}[{key}]", errors)
                if isinstance(pdata, dict) and pdata.get("Team") not in (None, team):
                    errors.append(f"TEAM player_data.{team}[{key}] reports team {pdata.get('Team')!r}")

        team_data = result.get("team_data", {}).get(team)
        if isinstance(team_data, dict):
            _validate_dict(team_data, TEAM_CONTRACT, f"team_data.{team}", errors)

    return errors


def _validate_dict(data: dict, contract: dict, path: str, errors: list[str]) -> None:
    """Recursively validate data against contract schema."""
    if not isinstance(data, dict):
        errors.append(f"{path}: expected dict, got {type(data).__name__}")
        return

    for key, expected_type in contract.items():
        full_path = f"{path}.{key}"
        if key not in data:
            errors.append(f"MISSING {full_path}")
            continue

        value = data[key]

        # If expected_type is a dict, recurse
        if isinstance(expected_type, dict):
            _validate_dict(value, expected_type, full_path, errors)
        # bool is an int subclass; don't let True pass as a count
        elif expected_type is int and isinstance(value, bool):
            errors.append(f"TYPE {full_path}: expected int, got bool = {value!r}")
        elif isinstance(expected_type, tuple):
            if value is not None and not isinstance(value, expected_type):
                errors.append(
                    f"TYPE {full_path}: expected {expected_type}, "
                    f"got {type(value).__name__} = {value!r}"
                )
        elif expected_type is not None:
            if value is not None and not isinstance(value, expected_type):
                errors.append(
                    f"TYPE {full_path}: expected {expected_type.__name__}, "
                    f"got {type(value).__name__} = {value!r}"
                )
