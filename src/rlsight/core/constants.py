"""
RLSight Replay Reducer - Constants

Attribute names, entity classes and field geometry used while rebuilding
match state from a decoded replay. Attribute names follow the property paths
emitted by the upstream replay decoder.
"""

from enum import Enum, StrEnum


class Team(int, Enum):
    """Team numbers as reported by the replay."""

    BLUE = 0
    ORANGE = 1

    @property
    def label(self) -> str:
        return self.name.lower()

    @property
    def opponent(self) -> "Team":
        return Team.ORANGE if self is Team.BLUE else Team.BLUE


class EntityClass(StrEnum):
    """Entity class markers that map onto capability tags."""

    PLAYER_IDENTITY = "TAGame.PRI_TA"
    PLAYER_UNIT = "TAGame.Car_TA"
    BALL = "TAGame.Ball_TA"
    TEAM_MARKER = "TAGame.Team_Soccar_TA"
    CAMERA = "TAGame.CameraSettingsActor_TA"


# Top-level document sections
METADATA_SECTION = "Metadata"
GOALS_SECTION = "Goals"
FRAMES_SECTION = "Frames"

# Per-frame mutation sets
SPAWNED_KEY = "Spawned"
UPDATED_KEY = "Updated"
DESTROYED_KEY = "Destroyed"

# Plain (untagged) keys carried on spawn payloads
CLASS_KEY = "Class"
NAME_KEY = "Name"

# ============================================================================
# Attribute names
# ============================================================================

ATTR_RB_STATE = "TAGame.RBActor_TA:ReplicatedRBState"
ATTR_UNIT_OWNER = "Engine.Pawn:PlayerReplicationInfo"
ATTR_BOOST_AMOUNT = "TAGame.CarComponent_Boost_TA:ReplicatedBoostAmount"
ATTR_COMPONENT_VEHICLE = "TAGame.CarComponent_TA:Vehicle"
ATTR_SECONDS_REMAINING = "TAGame.GameEvent_Soccar_TA:SecondsRemaining"
ATTR_HIT_TEAM = "TAGame.Ball_TA:HitTeamNum"
ATTR_CAMERA_SETTINGS = "TAGame.CameraSettingsActor_TA:ProfileSettings"
ATTR_CAMERA_OWNER = "TAGame.CameraSettingsActor_TA:PRI"

ATTR_PLAYER_NAME = "Engine.PlayerReplicationInfo:PlayerName"
ATTR_UNIQUE_ID = "Engine.PlayerReplicationInfo:UniqueId"
ATTR_PLAYER_TEAM = "Engine.PlayerReplicationInfo:Team"
ATTR_MATCH_SCORE = "TAGame.PRI_TA:MatchScore"
ATTR_MATCH_GOALS = "TAGame.PRI_TA:MatchGoals"
ATTR_MATCH_SHOTS = "TAGame.PRI_TA:MatchShots"
ATTR_MATCH_ASSISTS = "TAGame.PRI_TA:MatchAssists"
ATTR_MATCH_SAVES = "TAGame.PRI_TA:MatchSaves"
ATTR_LOADOUTS = "TAGame.PRI_TA:ClientLoadouts"

ATTR_SERVER_NAME = "Engine.GameReplicationInfo:ServerName"
ATTR_MAX_TEAM_SIZE = "TAGame.GameEvent_Team_TA:MaxTeamSize"
ATTR_PLAYLIST = "ProjectX.GRI_X:ReplicatedGamePlaylist"

# Scoreboard counters read off an identity, keyed by report field
SCOREBOARD_ATTRIBUTES = {
    "Score": ATTR_MATCH_SCORE,
    "Goals": ATTR_MATCH_GOALS,
    "Shots": ATTR_MATCH_SHOTS,
    "Assists": ATTR_MATCH_ASSISTS,
    "Saves": ATTR_MATCH_SAVES,
}

# Metadata keys passed straight through to the report (0 when absent)
METADATA_KEYS = [
    "MaxChannels",
    "Team0Score",
    "Team1Score",
    "PlayerName",
    "KeyframeDelay",
    "MaxReplaySizeMB",
    "NumFrames",
    "MatchType",
    "MapName",
    "ReplayName",
    "PrimaryPlayerTeam",
    "Id",
    "TeamSize",
    "RecordFPS",
    "Date",
]

# ============================================================================
# Analysis defaults
# ============================================================================

BALL_REF = "ball"

# Resource readings are a single unsigned byte
BOOST_MAX = 255

# Longitudinal distance from centre that starts a team's defensive zone
ZONE_THRESHOLD = 2000.0

# Ground, crossbar and aerial altitudes
HEIGHT_BOUNDS = (120.0, 250.0, 600.0)

# Seconds after the restart at which the kickoff result is read
KICKOFF_TIME_DELAY = 2

# Clock second that follows the opening kickoff, and its overtime counterpart
OPENING_KICKOFF_SECOND = 299
OVERTIME_KICKOFF_SECOND = -1

# Scoreboard points awarded per event
POINTS_WEIGHTS = {
    "Goals": 50,
    "Assists": 25,
    "Saves": 25,
    "Shots": 15,
}
