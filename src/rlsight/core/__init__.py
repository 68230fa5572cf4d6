"""
RLSight Core - Foundation modules for replay reconstruction.

This module contains the fundamental components:
- constants: Attribute names, entity classes and field geometry
- config: Application configuration management
- errors: Error and warning taxonomy
- entity_store / ingestor: Mutation-based entity model
- telemetry: Position, boost, clock and possession series
- parser: Document validation and full-replay reconstruction
- schemas: Data contracts for module boundaries
"""

from rlsight.core.constants import BALL_REF, EntityClass, Team
from rlsight.core.errors import (
    DataIntegrityError,
    KickoffAmbiguousError,
    RLSightError,
    StructuralError,
    UnresolvedBindingWarning,
)
from rlsight.core.schemas import AnalysisWarning, GoalRecord, MatchReport, PlayerReport, TeamReport

__all__ = [
    "BALL_REF",
    "EntityClass",
    "Team",
    "RLSightError",
    "StructuralError",
    "DataIntegrityError",
    "KickoffAmbiguousError",
    "UnresolvedBindingWarning",
    "AnalysisWarning",
    "GoalRecord",
    "MatchReport",
    "PlayerReport",
    "TeamReport",
]
