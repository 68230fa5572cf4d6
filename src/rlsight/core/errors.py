"""
Error taxonomy for replay reconstruction and analysis.

Structural and integrity errors abort the whole run. Kickoff ambiguity is
scoped to the kickoff statistic. Unresolved bindings are warnings: the
affected samples are dropped and the rest of the report is produced.
"""

from __future__ import annotations


class RLSightError(Exception):
    """Base class for all replay analysis errors."""


class StructuralError(RLSightError):
    """The input document is missing a required section or has the wrong shape."""


class DataIntegrityError(RLSightError):
    """A reading is outside its physical range; the upstream trace is corrupt."""

    def __init__(self, message: str, *, entity_id: str | None = None, frame: int | None = None):
        super().__init__(message)
        self.entity_id = entity_id
        self.frame = frame


class KickoffAmbiguousError(RLSightError):
    """The ball sat exactly on the centre line (or was missing) when a kickoff was checked."""

    def __init__(self, message: str, *, second: int | None = None):
        super().__init__(message)
        self.second = second


class UnresolvedBindingWarning(UserWarning):
    """Buffered samples could never be attributed to a player identity."""
