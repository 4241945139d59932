"""
coverage.py — per-position safety coverage across many pairwise runs

Each member of a cluster is aligned against the same reference
(representative) sequence, and each run yields a list of safety windows
on the reference axis.  Stacking those lists gives, for every reference
position, how many runs consider it safely aligned; runs of zero
coverage are gap regions.

Intervals here are half-open [start, end) over 0-indexed reference
positions, clamped to [0, L).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

from .graph import GraphInputError, SafetyWindow

Interval = Tuple[int, int]


def coverage_counts(window_lists: Sequence[Sequence[Sequence[int]]], length: int) -> np.ndarray:
    """
    coverage[i] = number of runs with an interval covering position i.

    A run contributes at most one to each position, even when its own
    intervals overlap.
    """
    if length <= 0:
        raise GraphInputError(f"Reference length must be positive, got {length}")
    coverage = np.zeros(length, dtype=int)
    for intervals in window_lists:
        covered = np.zeros(length, dtype=bool)
        for start, end in intervals:
            lo, hi = max(int(start), 0), min(int(end), length)
            if hi > lo:
                covered[lo:hi] = True
        coverage += covered
    return coverage


def gap_regions(coverage: np.ndarray) -> List[Interval]:
    """
    Maximal runs of zero coverage as half-open [start, end) intervals.

    A run still open at the last index closes at len(coverage).
    """
    zero = np.concatenate(([False], np.asarray(coverage) == 0, [False]))
    edges = np.flatnonzero(np.diff(zero.astype(np.int8)))
    starts, ends = edges[0::2], edges[1::2]
    return [(int(s), int(e)) for s, e in zip(starts, ends)]


@dataclass
class CoverageTable:
    """
    Coverage of one reference sequence by N pairwise safety-window lists.

    Attributes
    ----------
    counts : ndarray of int, shape (L,)
        Per-position number of covering runs.
    n_alignments : int
        N, the number of runs aggregated.
    window_lists : list of list of (start, end)
        The half-open intervals of each run, as supplied.
    """
    counts: np.ndarray
    n_alignments: int
    window_lists: List[List[Interval]] = field(default_factory=list)

    @classmethod
    def from_windows(
        cls,
        window_lists: Sequence[Sequence[Sequence[int]]],
        length: int,
    ) -> "CoverageTable":
        lists = [[(int(s), int(e)) for s, e in intervals] for intervals in window_lists]
        return cls(
            counts=coverage_counts(lists, length),
            n_alignments=len(lists),
            window_lists=lists,
        )

    @classmethod
    def from_safety_windows(
        cls,
        window_lists: Sequence[Sequence[SafetyWindow]],
        length: int,
    ) -> "CoverageTable":
        """Aggregate matrix-coordinate windows on the representative axis."""
        return cls.from_windows(
            [[(w.rep_start, w.rep_end) for w in windows] for windows in window_lists],
            length,
        )

    @property
    def length(self) -> int:
        return int(self.counts.shape[0])

    @property
    def gaps(self) -> List[Interval]:
        return gap_regions(self.counts)

    @property
    def fractions(self) -> np.ndarray:
        if self.n_alignments == 0:
            return np.zeros(self.length, dtype=float)
        return self.counts / float(self.n_alignments)

    @property
    def covered_positions(self) -> int:
        return int(np.count_nonzero(self.counts))

    @property
    def safe_fraction(self) -> float:
        return self.covered_positions / self.length

    @property
    def max_coverage(self) -> int:
        return int(self.counts.max()) if self.length else 0

    def alignments_overlapping(self, start: int, end: int) -> List[int]:
        """
        Indices of runs with a window overlapping the inclusive selection
        start..end (0-indexed reference positions).
        """
        if end < start:
            start, end = end, start
        hits: List[int] = []
        for idx, intervals in enumerate(self.window_lists):
            if any(s <= end and e > start for s, e in intervals):
                hits.append(idx)
        return hits
