"""
Mutation Ingestor - applies one frame of spawn/update/destroy records.

Per frame, spawns are applied first, then updates, then destroys, so a
same-frame spawn+update observes the spawned baseline. The unit -> identity
binding is refreshed from the owner attribute whenever a spawn or update
carries it. The resulting FrameDelta feeds the telemetry extractor for the
same frame before the next frame is ingested.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from rlsight.core.constants import (
    ATTR_UNIT_OWNER,
    DESTROYED_KEY,
    SPAWNED_KEY,
    UPDATED_KEY,
)
from rlsight.core.entity_store import EntityStore, RoleTags
from rlsight.core.errors import StructuralError
from rlsight.core.utils import entity_ref

logger = logging.getLogger(__name__)


@dataclass
class MutatedEntity:
    """An entity touched this frame: what it reported and what it now holds."""

    entity_id: str
    payload: dict[str, Any]  # attributes reported this frame
    attributes: dict[str, Any]  # merged attributes after the frame
    tags: RoleTags


@dataclass
class FrameDelta:
    """Everything the ingestor changed while applying one frame."""

    frame: int
    mutated: dict[str, MutatedEntity] = field(default_factory=dict)
    new_bindings: list[tuple[str, str]] = field(default_factory=list)  # (unit, identity)


def _mutation_set(frame: Mapping[str, Any], key: str, frame_index: int) -> dict[str, Any]:
    records = frame.get(key)
    if records is None:
        return {}
    if isinstance(records, Mapping):
        return {str(entity_id): payload for entity_id, payload in records.items()}
    if key == DESTROYED_KEY and isinstance(records, list):
        return {str(entity_id): None for entity_id in records}
    raise StructuralError(f"Frame {frame_index}: '{key}' must be a mapping of entity id to payload")


class MutationIngestor:
    """Drives an EntityStore from the per-frame mutation records."""

    def __init__(self, store: EntityStore | None = None):
        self.store = store if store is not None else EntityStore()

    def ingest(self, frame_index: int, frame: Mapping[str, Any]) -> FrameDelta:
        """Apply one frame's mutation sets and report what changed."""
        if not isinstance(frame, Mapping):
            raise StructuralError(f"Frame {frame_index} is not a mapping")

        spawned = _mutation_set(frame, SPAWNED_KEY, frame_index)
        updated = _mutation_set(frame, UPDATED_KEY, frame_index)
        destroyed = _mutation_set(frame, DESTROYED_KEY, frame_index)

        delta = FrameDelta(frame=frame_index)
        payloads: dict[str, dict[str, Any]] = {}

        for entity_id, attributes in spawned.items():
            attributes = dict(attributes or {})
            self.store.apply_spawn(entity_id, attributes)
            payloads[entity_id] = attributes
            self._refresh_binding(entity_id, attributes, delta)

        for entity_id, attributes in updated.items():
            attributes = dict(attributes or {})
            if not self.store.apply_update(entity_id, attributes):
                continue
            payloads[entity_id] = {**payloads.get(entity_id, {}), **attributes}
            self._refresh_binding(entity_id, attributes, delta)

        for entity_id, payload in payloads.items():
            entity = self.store.get(entity_id)
            if entity is None:
                continue
            delta.mutated[entity_id] = MutatedEntity(
                entity_id=entity_id,
                payload=payload,
                attributes=entity.attributes,
                tags=entity.tags,
            )

        for entity_id in destroyed:
            self.store.apply_destroy(entity_id, frame=frame_index)

        return delta

    def _refresh_binding(self, unit_id: str, attributes: Mapping[str, Any], delta: FrameDelta) -> None:
        if ATTR_UNIT_OWNER not in attributes:
            return
        identity_id = entity_ref(attributes[ATTR_UNIT_OWNER])
        if identity_id is None:
            return
        if self.store.bind_unit(unit_id, identity_id):
            logger.debug(f"Frame {delta.frame}: unit {unit_id} bound to identity {identity_id}")
            delta.new_bindings.append((unit_id, identity_id))
