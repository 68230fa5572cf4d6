"""
Replay Parser for decoded Rocket League replays

Takes the in-memory document produced by the upstream replay decoder,
validates its structure, and replays every frame through the
MutationIngestor and TelemetryExtractor. The EntityStore only lives for the
duration of parse(); what comes out is a ReplayData holding metadata, goals
and telemetry series.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from rlsight.core.config import AnalysisConfig
from rlsight.core.constants import (
    FRAMES_SECTION,
    GOALS_SECTION,
    METADATA_KEYS,
    METADATA_SECTION,
    Team,
)
from rlsight.core.entity_store import EntityStore
from rlsight.core.errors import StructuralError
from rlsight.core.ingestor import MutationIngestor
from rlsight.core.telemetry import TelemetryExtractor, TelemetrySeries
from rlsight.core.utils import PerformanceMonitor, unwrap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoalEvent:
    """A goal as recorded by the replay header."""

    frame: int
    scorer_name: str
    scorer_team: Team


@dataclass
class ReplayData:
    """Parsed replay data container."""

    metadata: dict[str, Any]
    goals: list[GoalEvent]
    telemetry: TelemetrySeries
    team_hints: dict[str, Team] = field(default_factory=dict)

    @property
    def frame_count(self) -> int:
        return self.telemetry.frame_count


def _parse_team(value: Any) -> Team:
    team_num = int(unwrap(value, 0))
    if team_num not in (Team.BLUE, Team.ORANGE):
        raise StructuralError(f"Unknown team number: {team_num}")
    return Team(team_num)


def parse_goal(record: Any, index: int = 0) -> GoalEvent:
    """Read one goal record (tagged or bare values)."""
    if not isinstance(record, Mapping):
        raise StructuralError(f"Goal {index} is not a mapping")
    if "frame" not in record:
        raise StructuralError(f"Goal {index} has no frame")
    try:
        return GoalEvent(
            frame=int(unwrap(record["frame"])),
            scorer_name=str(unwrap(record.get("PlayerName"), "")),
            scorer_team=_parse_team(record.get("PlayerTeam")),
        )
    except (TypeError, ValueError) as e:
        raise StructuralError(f"Goal {index} is malformed: {e}") from e


def read_team_hints(metadata: Mapping[str, Any]) -> dict[str, Team]:
    """Player name -> team table from the header's PlayerStats, when present."""
    hints: dict[str, Team] = {}
    for stats in unwrap(metadata.get("PlayerStats"), []) or []:
        if not isinstance(stats, Mapping):
            continue
        name = unwrap(stats.get("Name"))
        team = unwrap(stats.get("Team"))
        if name is None or team not in (Team.BLUE, Team.ORANGE):
            continue
        hints[str(name)] = Team(int(team))
    return hints


def validate_document(document: Any) -> None:
    """Reject documents missing any of the three required sections."""
    if not isinstance(document, Mapping):
        raise StructuralError(f"Replay document must be a mapping, got {type(document).__name__}")

    missing = [
        section
        for section in (METADATA_SECTION, GOALS_SECTION, FRAMES_SECTION)
        if section not in document
    ]
    if missing:
        raise StructuralError(f"Replay document is missing section(s): {', '.join(missing)}")

    if not isinstance(document[METADATA_SECTION], Mapping):
        raise StructuralError(f"'{METADATA_SECTION}' must be a mapping")
    if not isinstance(unwrap(document[GOALS_SECTION], []), list):
        raise StructuralError(f"'{GOALS_SECTION}' must be a list")
    if not isinstance(document[FRAMES_SECTION], list):
        raise StructuralError(f"'{FRAMES_SECTION}' must be a list")


class ReplayParser:
    """
    Rebuilds match telemetry from a decoded replay document.

    Example:
        >>> parser = ReplayParser(document)
        >>> replay = parser.parse()
        >>> len(replay.telemetry.clock)
        301
    """

    def __init__(self, document: Mapping[str, Any], config: AnalysisConfig | None = None):
        validate_document(document)
        self.document = document
        self.config = config or AnalysisConfig()
        self._data: ReplayData | None = None

    def parse(self) -> ReplayData:
        """
        Read metadata and goals, then replay every frame.

        Returns:
            ReplayData with the telemetry series; the entity store is discarded
        """
        if self._data is not None:
            return self._data

        raw_metadata = self.document[METADATA_SECTION]
        metadata = {key: unwrap(raw_metadata.get(key), 0) for key in METADATA_KEYS}
        goals = [
            parse_goal(record, i)
            for i, record in enumerate(unwrap(self.document[GOALS_SECTION], []))
        ]
        team_hints = read_team_hints(raw_metadata)

        frames = self.document[FRAMES_SECTION]
        store = EntityStore()
        ingestor = MutationIngestor(store)
        extractor = TelemetryExtractor(store, self.config, team_hints=team_hints)

        with PerformanceMonitor(f"Reconstructing {len(frames)} frames"):
            for index, frame in enumerate(frames):
                delta = ingestor.ingest(index, frame)
                extractor.extract(delta)
            telemetry = extractor.finalize(frame_count=len(frames))

        logger.info(f"Parsed replay: {len(goals)} goals, {len(telemetry.playing_identities)} players")
        self._data = ReplayData(
            metadata=metadata,
            goals=goals,
            telemetry=telemetry,
            team_hints=team_hints,
        )
        return self._data


def parse_replay(document: Mapping[str, Any], config: AnalysisConfig | None = None) -> ReplayData:
    """Convenience wrapper around ReplayParser."""
    return ReplayParser(document, config).parse()
