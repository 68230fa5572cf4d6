"""
Clock Aligner - maps frame indices onto match-clock seconds.

The replay clock only ticks on frames that carry a SecondsRemaining update,
so every other frame is aligned through a nearest-frame lookup. When the
match went to overtime the clock restarts after hitting zero; those values
are stored negated so seconds stay a unique key across both periods.

All analytics cross frame-indexed and second-indexed data through
nearest_frames() / nearest_frame_for(), which share one implementation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from rlsight.core.telemetry import ClockSample, PositionSample

logger = logging.getLogger(__name__)


def detect_overtime(seconds: Sequence[int]) -> bool:
    """Regulation shows one second remaining exactly once; overtime shows it again."""
    return sum(1 for value in seconds if value == 1) > 1


def align_seconds(seconds: Sequence[int], overtime: bool) -> list[int]:
    """Negate every value after the first zero when the match went to overtime."""
    if not overtime:
        return list(seconds)
    aligned = []
    past_zero = False
    for value in seconds:
        aligned.append(-abs(value) if past_zero else value)
        if value == 0:
            past_zero = True
    return aligned


class ClockAligner:
    """
    Bidirectional frame <-> second mapping built from clock samples.

    Example:
        >>> clock = ClockAligner.from_samples(series.clock)
        >>> clock.seconds_at(1234)
        287
    """

    def __init__(self, frames: Sequence[int], seconds: Sequence[int]):
        if len(frames) != len(seconds):
            raise ValueError("frames and seconds must have the same length")
        self._frames = np.asarray(frames, dtype=np.int64)
        self._raw = np.asarray(seconds, dtype=np.int64)
        if self._frames.size and np.any(np.diff(self._frames) <= 0):
            raise ValueError("clock frames must be strictly increasing")
        self.overtime = detect_overtime(seconds)
        self._seconds = np.asarray(align_seconds(seconds, self.overtime), dtype=np.int64)

    @classmethod
    def from_samples(cls, samples: Iterable[ClockSample]) -> ClockAligner:
        """Build from clock samples; the last sample recorded for a frame wins."""
        by_frame: dict[int, int] = {}
        for sample in samples:
            by_frame[sample.frame] = sample.seconds_remaining
        frames = sorted(by_frame)
        clock = cls(frames, [by_frame[f] for f in frames])
        logger.debug(f"Clock: {len(clock)} samples, overtime={clock.overtime}")
        return clock

    def __len__(self) -> int:
        return int(self._frames.size)

    def __bool__(self) -> bool:
        return self._frames.size > 0

    @property
    def frames(self) -> list[int]:
        return self._frames.tolist()

    @property
    def mapping(self) -> dict[int, int]:
        """frame -> aligned second for every frame carrying a clock sample."""
        return dict(zip(self._frames.tolist(), self._seconds.tolist()))

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _nearest_indices(self, targets: np.ndarray) -> np.ndarray:
        if not self._frames.size:
            raise LookupError("clock has no samples")
        last = self._frames.size - 1
        upper = np.searchsorted(self._frames, targets, side="left")
        hi = np.clip(upper, 0, last)
        lo = np.clip(upper - 1, 0, last)
        hi_gap = np.abs(self._frames[hi] - targets)
        lo_gap = np.abs(targets - self._frames[lo])
        # Equal gaps resolve to the lower frame
        return np.where(hi_gap < lo_gap, hi, lo)

    def nearest_frames(self, targets: Sequence[int] | np.ndarray) -> np.ndarray:
        """Clock frame nearest to each target frame (ties go to the lower frame)."""
        targets = np.asarray(targets, dtype=np.int64)
        return self._frames[self._nearest_indices(targets)]

    def nearest_frame_for(self, target_frame: int) -> int:
        return int(self.nearest_frames([target_frame])[0])

    def seconds_for_frames(self, targets: Sequence[int] | np.ndarray) -> np.ndarray:
        """Aligned second for each target frame."""
        targets = np.asarray(targets, dtype=np.int64)
        return self._seconds[self._nearest_indices(targets)]

    def seconds_at(self, frame: int) -> int:
        return int(self.seconds_for_frames([frame])[0])

    def frames_for_second(self, second: int) -> list[int]:
        """Every clock frame showing ``second``; the inverse mapping is one-to-many."""
        return self._frames[self._seconds == second].tolist()

    def next_sample_frame_after(self, frame: int) -> int | None:
        """First clock frame strictly after ``frame``, or None past the last sample."""
        index = int(np.searchsorted(self._frames, frame, side="right"))
        if index >= self._frames.size:
            return None
        return int(self._frames[index])

    def bucket_by_second(
        self, positions: Sequence[PositionSample]
    ) -> dict[int, dict[str, PositionSample]]:
        """
        Group position samples by aligned second.

        Within a second the latest sample per entity ref wins, so each bucket
        holds at most one sample for the ball and one per player.
        """
        if not positions or not self:
            return {}
        seconds = self.seconds_for_frames([s.frame for s in positions])
        buckets: dict[int, dict[str, PositionSample]] = {}
        for second, sample in zip(seconds.tolist(), positions):
            buckets.setdefault(second, {})[sample.entity_ref] = sample
        return buckets
