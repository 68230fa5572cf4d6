"""Tests for per-frame mutation ingestion."""

from __future__ import annotations

import pytest
from conftest import BALL, BLUE_CAR, BLUE_PRI, ball, frame, identity, rb_state, unit

from rlsight.core.constants import ATTR_RB_STATE
from rlsight.core.errors import StructuralError
from rlsight.core.ingestor import MutationIngestor


class TestMutationIngestor:
    """Spawn -> update -> destroy ordering and the FrameDelta it reports."""

    def test_same_frame_spawn_then_update(self):
        ingestor = MutationIngestor()
        delta = ingestor.ingest(
            0,
            frame(spawned={BALL: ball(0, 0, 93)}, updated={BALL: rb_state(0, 10, 93)}),
        )
        entity = ingestor.store.get(BALL)
        assert entity.attributes[ATTR_RB_STATE]["Value"]["Position"] == [0, 10, 93]
        assert delta.mutated[BALL].tags.is_ball

    def test_update_and_destroy_in_one_frame(self):
        ingestor = MutationIngestor()
        ingestor.ingest(0, frame(spawned={BALL: ball(0, 0, 93)}))
        delta = ingestor.ingest(1, frame(updated={BALL: rb_state(1, 1, 93)}, destroyed=[BALL]))
        assert BALL in delta.mutated
        assert BALL not in ingestor.store

    def test_no_op_update_is_not_reported(self):
        ingestor = MutationIngestor()
        ingestor.ingest(0, frame(spawned={BALL: ball(0, 0, 93)}))
        delta = ingestor.ingest(1, frame(updated={BALL: rb_state(0, 0, 93)}))
        assert delta.mutated == {}

    def test_unknown_ids_are_tolerated(self):
        ingestor = MutationIngestor()
        delta = ingestor.ingest(0, frame(updated={"77": {"a": 1}}, destroyed=["78"]))
        assert delta.mutated == {}
        assert len(ingestor.store) == 0

    def test_owner_attribute_binds_unit(self):
        ingestor = MutationIngestor()
        delta = ingestor.ingest(
            0, frame(spawned={BLUE_PRI: identity("Alpha"), BLUE_CAR: unit(BLUE_PRI)})
        )
        assert delta.new_bindings == [(BLUE_CAR, BLUE_PRI)]
        assert ingestor.store.identity_for_unit(BLUE_CAR) == BLUE_PRI

    def test_integer_ids_are_normalised(self):
        ingestor = MutationIngestor()
        ingestor.ingest(0, {"Spawned": {2: ball(0, 0, 93)}})
        assert "2" in ingestor.store

    def test_destroyed_may_be_a_mapping(self):
        ingestor = MutationIngestor()
        ingestor.ingest(0, frame(spawned={BALL: ball(0, 0, 93)}))
        ingestor.ingest(1, {"Destroyed": {BALL: None}})
        assert BALL not in ingestor.store

    def test_same_frame_car_swap_keeps_player_present(self):
        ingestor = MutationIngestor()
        ingestor.ingest(0, frame(spawned={BLUE_PRI: identity("Alpha"), BLUE_CAR: unit(BLUE_PRI)}))
        delta = ingestor.ingest(1, frame(spawned={"22": unit(BLUE_PRI)}, destroyed=[BLUE_CAR]))
        assert delta.new_bindings == [("22", BLUE_PRI)]
        assert BLUE_PRI not in ingestor.store.leave_frames

    def test_last_car_destroyed_stamps_leave_frame(self):
        ingestor = MutationIngestor()
        ingestor.ingest(0, frame(spawned={BLUE_PRI: identity("Alpha"), BLUE_CAR: unit(BLUE_PRI)}))
        ingestor.ingest(3, frame(destroyed=[BLUE_CAR]))
        assert ingestor.store.leave_frames == {BLUE_PRI: 3}

    def test_non_mapping_frame_raises(self):
        with pytest.raises(StructuralError):
            MutationIngestor().ingest(0, ["not", "a", "frame"])

    def test_malformed_mutation_set_raises(self):
        with pytest.raises(StructuralError):
            MutationIngestor().ingest(0, {"Updated": ["2"]})
