"""
Telemetry Extractor - turns merged entity state into time series.

For each frame's mutated entities the extractor records:
- Position samples for the ball and every bound player unit
- Boost (resource) samples, attributed to an identity through the
  component -> vehicle -> identity chain
- Clock samples and possession changes
- Player profiles (name, team, scoreboard, loadout, camera)

Boost readings that arrive before their vehicle is bound to an identity are
parked in a PendingQueue keyed by the raw component id and flushed, in frame
order, as soon as the binding resolves. Whatever is still pending at the end
of the stream is dropped with an UnresolvedBindingWarning.
"""

from __future__ import annotations

import logging
import re
import warnings
from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from rlsight.core.config import AnalysisConfig
from rlsight.core.constants import (
    ATTR_BOOST_AMOUNT,
    ATTR_CAMERA_OWNER,
    ATTR_CAMERA_SETTINGS,
    ATTR_COMPONENT_VEHICLE,
    ATTR_HIT_TEAM,
    ATTR_LOADOUTS,
    ATTR_MAX_TEAM_SIZE,
    ATTR_PLAYER_NAME,
    ATTR_PLAYER_TEAM,
    ATTR_PLAYLIST,
    ATTR_RB_STATE,
    ATTR_SECONDS_REMAINING,
    ATTR_SERVER_NAME,
    ATTR_UNIQUE_ID,
    BALL_REF,
    NAME_KEY,
    SCOREBOARD_ATTRIBUTES,
    Team,
)
from rlsight.core.entity_store import EntityStore
from rlsight.core.errors import DataIntegrityError, UnresolvedBindingWarning
from rlsight.core.ingestor import FrameDelta, MutatedEntity
from rlsight.core.schemas import AnalysisWarning
from rlsight.core.utils import entity_ref, stat_value, unwrap

logger = logging.getLogger(__name__)

_TRAILING_DIGIT = re.compile(r"(\d)\D*$")

# Match facts captured from whichever entity reports them
_FACT_ATTRIBUTES = {
    ATTR_SERVER_NAME: "ServerName",
    ATTR_MAX_TEAM_SIZE: "Max_Team_Size",
    ATTR_PLAYLIST: "Playlist",
}


# ============================================================================
# Samples
# ============================================================================


@dataclass(frozen=True)
class PositionSample:
    """Physics state of the ball or a player's unit at one frame."""

    entity_ref: str  # identity id or "ball"
    x: float
    y: float
    z: float
    yaw: float
    pitch: float
    roll: float
    frame: int

    @property
    def position(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class ResourceSample:
    """Boost reading for an identity; level is the raw 0-255 byte."""

    identity_id: str
    frame: int
    level: int


@dataclass(frozen=True)
class ClockSample:
    frame: int
    seconds_remaining: int


@dataclass(frozen=True)
class PossessionSample:
    """The ball was last touched by ``team`` as of ``frame``."""

    frame: int
    team: Team


@dataclass
class PlayerProfile:
    """Everything the report needs to know about one player identity."""

    identity_id: str
    name: str = ""
    unique_id: str | None = None
    team: Team | None = None
    team_marker: str | None = None
    scoreboard: dict[str, int] = field(default_factory=lambda: dict.fromkeys(SCOREBOARD_ATTRIBUTES, 0))
    car: str | None = None
    camera: Any = None
    join_frame: int = 0
    leave_frame: int | None = None

    @property
    def key(self) -> str:
        """Report key: the platform id when known, else the identity entity id."""
        return self.unique_id or self.identity_id


# ============================================================================
# Pending attribution
# ============================================================================


@dataclass(frozen=True)
class PendingResource:
    component_id: str
    frame: int
    level: int


class PendingQueue:
    """Resource readings waiting for their component's identity to resolve."""

    def __init__(self):
        self._pending: dict[str, list[PendingResource]] = {}

    def __len__(self) -> int:
        return sum(len(items) for items in self._pending.values())

    def __contains__(self, component_id: object) -> bool:
        return component_id in self._pending

    def component_ids(self) -> list[str]:
        return list(self._pending)

    def push(self, component_id: str, frame: int, level: int) -> None:
        self._pending.setdefault(component_id, []).append(PendingResource(component_id, frame, level))

    def pop(self, component_id: str) -> list[PendingResource]:
        return self._pending.pop(component_id, [])

    def drain(self) -> dict[str, list[PendingResource]]:
        pending, self._pending = self._pending, {}
        return pending


# ============================================================================
# Series
# ============================================================================


@dataclass
class TelemetrySeries:
    """Append-only time series produced by a full pass over the replay."""

    frame_count: int = 0
    positions: list[PositionSample] = field(default_factory=list)
    resources: dict[str, list[ResourceSample]] = field(default_factory=dict)
    clock: list[ClockSample] = field(default_factory=list)
    possession: list[PossessionSample] = field(default_factory=list)
    profiles: dict[str, PlayerProfile] = field(default_factory=dict)
    playing_identities: set[str] = field(default_factory=set)
    facts: dict[str, Any] = field(default_factory=dict)
    dropped_resources: dict[str, int] = field(default_factory=dict)
    warnings: list[AnalysisWarning] = field(default_factory=list)

    def positions_frame(self) -> pd.DataFrame:
        """Position samples as a DataFrame (entity_ref, x, y, z, yaw, pitch, roll, frame)."""
        columns = ["entity_ref", "x", "y", "z", "yaw", "pitch", "roll", "frame"]
        if not self.positions:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame([vars(s) for s in self.positions], columns=columns)

    def ball_positions(self) -> list[PositionSample]:
        return [s for s in self.positions if s.entity_ref == BALL_REF]

    def playing_profiles(self) -> dict[str, PlayerProfile]:
        """Profiles of identities that drove a unit at some point (no spectators)."""
        return {
            identity_id: profile
            for identity_id, profile in self.profiles.items()
            if identity_id in self.playing_identities
        }


# ============================================================================
# Extractor
# ============================================================================


def _vector(value: Any, names: tuple[str, str, str]) -> tuple[float, float, float] | None:
    if isinstance(value, Mapping):
        if not all(name in value for name in names):
            return None
        return tuple(float(value[name]) for name in names)  # type: ignore[return-value]
    if isinstance(value, (list, tuple)) and len(value) >= 3:
        return (float(value[0]), float(value[1]), float(value[2]))
    return None


def _loadout_body(value: Any) -> str | None:
    loadouts = unwrap(value)
    if not isinstance(loadouts, Mapping):
        return None
    first = unwrap(loadouts.get("Loadout1"))
    if not isinstance(first, Mapping):
        return None
    body = first.get("Body")
    if isinstance(body, Mapping):
        return body.get("Name")
    return body


def _unique_id(value: Any) -> str | None:
    unique = unwrap(value)
    if isinstance(unique, Mapping):
        unique = unwrap(unique.get("Remote"))
    if unique is None or isinstance(unique, Mapping):
        return None
    return str(unique)


def _team_from_marker_name(name: Any) -> Team | None:
    match = _TRAILING_DIGIT.search(str(name or ""))
    if match is None or int(match.group(1)) not in (Team.BLUE, Team.ORANGE):
        return None
    return Team(int(match.group(1)))


class TelemetryExtractor:
    """
    Derives samples from each FrameDelta while the store is still live.

    Args:
        store: The EntityStore the ingestor writes to
        config: Analysis thresholds (boost ceiling)
        team_hints: Authoritative player name -> team table, when the
            document provides one
    """

    def __init__(
        self,
        store: EntityStore,
        config: AnalysisConfig | None = None,
        team_hints: Mapping[str, Team] | None = None,
    ):
        self.store = store
        self.config = config or AnalysisConfig()
        self.team_hints = dict(team_hints or {})
        self.series = TelemetrySeries()
        self.pending = PendingQueue()
        self._team_markers: dict[str, Team] = {}
        self._seen_identities: set[str] = set()
        self._resources: dict[str, list[ResourceSample]] = defaultdict(list)

    def extract(self, delta: FrameDelta) -> None:
        """Record every observation carried by one frame's mutations."""
        frame = delta.frame
        for mutated in delta.mutated.values():
            payload = mutated.payload

            if mutated.tags.is_team_marker:
                self._record_team_marker(mutated)
            if mutated.tags.is_player_identity:
                self._record_profile(mutated, frame)
            if ATTR_RB_STATE in payload:
                self._record_position(mutated, frame)
            if ATTR_BOOST_AMOUNT in payload:
                self._record_resource(mutated, frame)
            if ATTR_SECONDS_REMAINING in payload:
                seconds = unwrap(payload[ATTR_SECONDS_REMAINING])
                self.series.clock.append(ClockSample(frame=frame, seconds_remaining=int(seconds)))
            if ATTR_HIT_TEAM in payload:
                self._record_possession(payload[ATTR_HIT_TEAM], frame)
            if ATTR_CAMERA_SETTINGS in payload and mutated.tags.is_camera:
                self._record_camera(mutated)
            for attribute, fact in _FACT_ATTRIBUTES.items():
                if attribute in payload:
                    self.series.facts[fact] = unwrap(payload[attribute])

        for identity_id, leave_frame in self.store.leave_frames.items():
            if identity_id in self.series.profiles:
                self.series.profiles[identity_id].leave_frame = leave_frame

        if self.pending and (delta.new_bindings or self._vehicle_attached(delta)):
            self._drain_resolved()

    def finalize(self, frame_count: int) -> TelemetrySeries:
        """Close the stream: drop unresolved readings and sort series by frame."""
        self._drain_resolved()
        dropped = self.pending.drain()
        if dropped:
            counts = {component_id: len(items) for component_id, items in dropped.items()}
            total = sum(counts.values())
            message = (
                f"Dropped {total} boost readings from {len(counts)} component(s) "
                f"that were never bound to a player"
            )
            logger.warning(message)
            warnings.warn(message, UnresolvedBindingWarning, stacklevel=2)
            self.series.dropped_resources = counts
            self.series.warnings.append(
                AnalysisWarning(
                    module="telemetry",
                    code="UNRESOLVED_BOOST_BINDING",
                    message=message,
                    impact="average boost excludes the dropped readings",
                )
            )

        for profile in self.series.profiles.values():
            self._resolve_team(profile)

        self.series.frame_count = frame_count
        self.series.playing_identities = set(self.store.bound_identities)
        self.series.resources = {
            identity_id: sorted(samples, key=lambda s: s.frame)
            for identity_id, samples in self._resources.items()
        }
        logger.info(
            f"Telemetry: {len(self.series.positions)} positions, "
            f"{sum(len(s) for s in self.series.resources.values())} boost readings, "
            f"{len(self.series.clock)} clock samples, {len(self.series.profiles)} identities"
        )
        return self.series

    # ------------------------------------------------------------------
    # Recorders
    # ------------------------------------------------------------------

    def _record_position(self, mutated: MutatedEntity, frame: int) -> None:
        state = unwrap(mutated.payload[ATTR_RB_STATE])
        if not isinstance(state, Mapping):
            return
        position = _vector(state.get("Position"), ("x", "y", "z"))
        if position is None:
            return
        rotation = _vector(state.get("Rotation"), ("yaw", "pitch", "roll")) or (0.0, 0.0, 0.0)

        ref = self.store.identity_for_unit(mutated.entity_id)
        if ref is None:
            if not mutated.tags.is_ball:
                return
            ref = BALL_REF

        self.series.positions.append(PositionSample(ref, *position, *rotation, frame=frame))

    def _record_resource(self, mutated: MutatedEntity, frame: int) -> None:
        level = unwrap(mutated.payload[ATTR_BOOST_AMOUNT])
        if not isinstance(level, (int, float)) or not 0 <= level <= self.config.boost_max:
            raise DataIntegrityError(
                f"Boost reading {level!r} on entity {mutated.entity_id} at frame {frame} "
                f"is outside [0, {self.config.boost_max}]",
                entity_id=mutated.entity_id,
                frame=frame,
            )

        component_id = mutated.entity_id
        identity_id = self._component_identity(mutated.attributes)
        if identity_id is None:
            self.pending.push(component_id, frame, int(level))
            return

        self._flush(component_id, identity_id)
        self._resources[identity_id].append(ResourceSample(identity_id, frame, int(level)))

    def _record_possession(self, value: Any, frame: int) -> None:
        team_num = unwrap(value)
        if team_num not in (Team.BLUE, Team.ORANGE):
            logger.debug(f"Frame {frame}: ignoring possession marker {team_num!r}")
            return
        self.series.possession.append(PossessionSample(frame=frame, team=Team(team_num)))

    def _record_team_marker(self, mutated: MutatedEntity) -> None:
        team = _team_from_marker_name(mutated.attributes.get(NAME_KEY))
        if team is not None:
            self._team_markers[mutated.entity_id] = team

    def _record_profile(self, mutated: MutatedEntity, frame: int) -> None:
        attributes = mutated.attributes
        profile = self.series.profiles.setdefault(
            mutated.entity_id, PlayerProfile(identity_id=mutated.entity_id)
        )
        # A camera may have created the profile before the identity itself appeared
        if mutated.entity_id not in self._seen_identities:
            self._seen_identities.add(mutated.entity_id)
            profile.join_frame = frame

        if ATTR_PLAYER_NAME in attributes:
            profile.name = str(unwrap(attributes[ATTR_PLAYER_NAME], ""))
        if ATTR_UNIQUE_ID in attributes:
            profile.unique_id = _unique_id(attributes[ATTR_UNIQUE_ID]) or profile.unique_id
        if ATTR_LOADOUTS in attributes:
            profile.car = _loadout_body(attributes[ATTR_LOADOUTS]) or profile.car
        for field_name, attribute in SCOREBOARD_ATTRIBUTES.items():
            profile.scoreboard[field_name] = int(stat_value(attributes, attribute))

        if ATTR_PLAYER_TEAM in attributes:
            profile.team_marker = entity_ref(attributes[ATTR_PLAYER_TEAM])
        self._resolve_team(profile)

    def _resolve_team(self, profile: PlayerProfile) -> None:
        # Team is immutable once observed
        if profile.team is not None:
            return
        if profile.name in self.team_hints:
            profile.team = self.team_hints[profile.name]
        elif profile.team_marker is not None:
            profile.team = self._team_markers.get(profile.team_marker)

    def _record_camera(self, mutated: MutatedEntity) -> None:
        owner = entity_ref(mutated.attributes.get(ATTR_CAMERA_OWNER))
        if owner is None:
            return
        settings = unwrap(mutated.payload[ATTR_CAMERA_SETTINGS])
        profile = self.series.profiles.setdefault(owner, PlayerProfile(identity_id=owner))
        profile.camera = settings

    # ------------------------------------------------------------------
    # Pending attribution
    # ------------------------------------------------------------------

    def _component_identity(self, attributes: Mapping[str, Any]) -> str | None:
        vehicle_id = entity_ref(attributes.get(ATTR_COMPONENT_VEHICLE))
        return self.store.identity_for_unit(vehicle_id)

    def _vehicle_attached(self, delta: FrameDelta) -> bool:
        return any(
            ATTR_COMPONENT_VEHICLE in mutated.payload and mutated.entity_id in self.pending
            for mutated in delta.mutated.values()
        )

    def _flush(self, component_id: str, identity_id: str) -> None:
        for item in self.pending.pop(component_id):
            self._resources[identity_id].append(ResourceSample(identity_id, item.frame, item.level))

    def _drain_resolved(self) -> None:
        for component_id in self.pending.component_ids():
            component = self.store.get(component_id)
            if component is None:
                continue
            identity_id = self._component_identity(component.attributes)
            if identity_id is not None:
                logger.debug(f"Attributing buffered boost of component {component_id} to {identity_id}")
                self._flush(component_id, identity_id)
