"""
Entity Store - authoritative merged attributes for every live replay entity.

Entities are keyed by the decoder's entity id. Attributes accumulate through
shallow merges (incoming keys win) until the entity is destroyed, at which
point its entry is dropped and the id may be reused by a later spawn.

Roles are capability tags recomputed from the merged attributes every time
they change, so an entity can gain a role as more attributes arrive.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from rlsight.core.constants import (
    ATTR_CAMERA_SETTINGS,
    ATTR_PLAYER_NAME,
    ATTR_UNIT_OWNER,
    CLASS_KEY,
    EntityClass,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleTags:
    """Capability tags derived from an entity's merged attributes."""

    is_player_identity: bool = False
    is_player_unit: bool = False
    is_ball: bool = False
    is_team_marker: bool = False
    is_camera: bool = False

    @classmethod
    def from_attributes(cls, attributes: Mapping[str, Any]) -> RoleTags:
        entity_class = attributes.get(CLASS_KEY)
        return cls(
            is_player_identity=(
                entity_class == EntityClass.PLAYER_IDENTITY or ATTR_PLAYER_NAME in attributes
            ),
            is_player_unit=(
                entity_class == EntityClass.PLAYER_UNIT or ATTR_UNIT_OWNER in attributes
            ),
            is_ball=entity_class == EntityClass.BALL,
            is_team_marker=entity_class == EntityClass.TEAM_MARKER,
            is_camera=(
                entity_class == EntityClass.CAMERA or ATTR_CAMERA_SETTINGS in attributes
            ),
        )


@dataclass
class Entity:
    """A live entity and its accumulated attributes."""

    entity_id: str
    attributes: dict[str, Any] = field(default_factory=dict)
    tags: RoleTags = field(default_factory=RoleTags)

    def merge(self, attributes: Mapping[str, Any]) -> bool:
        """Shallow-merge incoming attributes; return False when nothing would change."""
        if all(
            key in self.attributes and self.attributes[key] == value
            for key, value in attributes.items()
        ):
            return False
        self.attributes = {**self.attributes, **attributes}
        self.tags = RoleTags.from_attributes(self.attributes)
        return True


class EntityStore:
    """
    Holds every live entity plus the unit -> identity binding table.

    Unknown ids on update or destroy are tolerated as no-ops: decoded traces
    routinely reference entities whose spawn was never captured.
    """

    def __init__(self):
        self._entities: dict[str, Entity] = {}
        # unit id -> identity id, most recent observation wins
        self._unit_bindings: dict[str, str] = {}
        self.bound_identities: set[str] = set()
        self.leave_frames: dict[str, int] = {}

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities.values())

    def get(self, entity_id: str) -> Entity | None:
        return self._entities.get(entity_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def apply_spawn(self, entity_id: str, attributes: Mapping[str, Any]) -> Entity:
        """Create the entity, or merge into it when the id is already live."""
        entity = self._entities.get(entity_id)
        if entity is None:
            # A fresh spawn reusing a dead unit's id must not inherit its binding
            self._unit_bindings.pop(entity_id, None)
            entity = Entity(entity_id=entity_id)
            self._entities[entity_id] = entity
        entity.merge(attributes)
        return entity

    def apply_update(self, entity_id: str, attributes: Mapping[str, Any]) -> bool:
        """Merge changes into a live entity. Returns True if anything changed."""
        entity = self._entities.get(entity_id)
        if entity is None:
            logger.debug(f"Ignoring update for unknown entity {entity_id}")
            return False
        return entity.merge(attributes)

    def apply_destroy(self, entity_id: str, frame: int = 0) -> Entity | None:
        """Drop a live entity, stamping the owning identity's leave frame for units."""
        entity = self._entities.pop(entity_id, None)
        if entity is None:
            logger.debug(f"Ignoring destroy for unknown entity {entity_id}")
            return None
        if entity.tags.is_player_unit:
            identity_id = self._unit_bindings.get(entity_id)
            if identity_id is not None and not self._drives_live_unit(identity_id):
                self.leave_frames[identity_id] = frame
        return entity

    # ------------------------------------------------------------------
    # Unit bindings
    # ------------------------------------------------------------------

    def bind_unit(self, unit_id: str, identity_id: str) -> bool:
        """Record that a unit is driven by an identity. Returns True on a new binding."""
        self.bound_identities.add(identity_id)
        if self._unit_bindings.get(unit_id) == identity_id:
            return False
        self._unit_bindings[unit_id] = identity_id
        self.leave_frames.pop(identity_id, None)
        return True

    def identity_for_unit(self, unit_id: str | None) -> str | None:
        if unit_id is None:
            return None
        return self._unit_bindings.get(unit_id)

    def _drives_live_unit(self, identity_id: str) -> bool:
        return any(
            bound == identity_id and unit_id in self._entities
            for unit_id, bound in self._unit_bindings.items()
        )
