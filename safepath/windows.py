"""
windows.py — projecting safety windows onto a viewed path

The upstream engine flags diagonal bands of the alignment matrix as
"safe".  When a user views a particular path (the optimal one or a custom
one), only the part of each band that the path actually walks along is
of interest.  project() keeps those parts:

  1. walk the gapped pair column by column, counting ungapped positions
     (1-indexed) on each axis,
  2. every gap-free column gives a traversal point (repPos, memPos),
  3. a window keeps the traversal points lying on its diagonal,
  4. the window is clipped to the min/max of those points on each axis;
     windows with none are dropped.

Projection is idempotent: projecting an already clipped list against the
same alignment returns it unchanged.
"""
from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from . import default
from .geometry import diagonal_mask
from .graph import SafetyWindow, pair_windows, split_windows

Interval = Tuple[int, int]


def traversal_points(
    aligned_rep: str,
    aligned_mem: str,
    origin: Tuple[int, int] = (0, 0),
) -> np.ndarray:
    """
    1-indexed (repPos, memPos) pairs at every column without a gap.

    `origin` is the matrix position the alignment starts from; positions
    are counted from origin + 1 so that an alignment of a path starting
    mid-matrix reports absolute residue numbers.

    Returns
    -------
    ndarray of int, shape (k, 2)
    """
    if len(aligned_rep) != len(aligned_mem):
        raise ValueError(
            f"Aligned strings differ in length: {len(aligned_rep)} vs {len(aligned_mem)}"
        )
    gap = default.GAP_CHAR
    rep_res = np.array([c != gap for c in aligned_rep], dtype=bool)
    mem_res = np.array([c != gap for c in aligned_mem], dtype=bool)
    rep_pos = np.cumsum(rep_res)
    mem_pos = np.cumsum(mem_res)
    both = rep_res & mem_res
    points = np.column_stack((rep_pos[both], mem_pos[both])).astype(int)
    return points + np.asarray(origin, dtype=int)


def project_windows(
    aligned_rep: str,
    aligned_mem: str,
    windows: Sequence[SafetyWindow],
    origin: Tuple[int, int] = (0, 0),
) -> List[Tuple[int, SafetyWindow]]:
    """
    Clip each window to the portion realised by the alignment.

    `origin` is passed through to traversal_points.

    Returns
    -------
    list of (index, SafetyWindow)
        `index` is the window's position in `windows`; dropped windows
        are absent.
    """
    points = traversal_points(aligned_rep, aligned_mem, origin)
    kept: List[Tuple[int, SafetyWindow]] = []
    for idx, window in enumerate(windows):
        hits = points[diagonal_mask(points, window)]
        if hits.size == 0:
            continue
        kept.append((
            idx,
            SafetyWindow(
                rep_start=int(hits[:, 0].min()),
                rep_end=int(hits[:, 0].max()),
                mem_start=int(hits[:, 1].min()),
                mem_end=int(hits[:, 1].max()),
            ),
        ))
    return kept


def project(
    aligned_rep: str,
    aligned_mem: str,
    rep_windows: Sequence[Sequence[int]],
    mem_windows: Sequence[Sequence[int]],
) -> Tuple[List[Interval], List[Interval]]:
    """
    Project index-paired window lists (1-indexed, ungapped coordinates)
    onto an alignment.

    Returns the two parallel lists of clipped windows.
    """
    windows = pair_windows(rep_windows, mem_windows)
    clipped = [w for _, w in project_windows(aligned_rep, aligned_mem, windows)]
    return split_windows(clipped)


def position_windows(windows: Sequence[SafetyWindow]) -> List[Tuple[int, SafetyWindow]]:
    """
    Matrix-coordinate windows as 1-indexed residue windows.

    A band from matrix point (rs, ms) to (re, me) covers residues
    rs+1..re and ms+1..me.  Bands of zero length cover no residue and
    are skipped; the returned pairs carry each window's original index.
    """
    converted: List[Tuple[int, SafetyWindow]] = []
    for idx, w in enumerate(windows):
        if w.rep_end > w.rep_start and w.mem_end > w.mem_start:
            converted.append(
                (idx, SafetyWindow(w.rep_start + 1, w.rep_end, w.mem_start + 1, w.mem_end))
            )
    return converted


def to_sequence_windows(
    windows: Sequence[SafetyWindow],
) -> Tuple[List[Interval], List[Interval]]:
    """
    Convert matrix-coordinate windows into 1-indexed inclusive sequence
    positions, one list per axis.

    A matrix window s..e covers residues s+1..e.  Empty results are
    dropped independently on each axis, so the two lists are for display
    and are not index-paired.
    """
    rep: List[Interval] = []
    mem: List[Interval] = []
    for w in windows:
        if w.rep_end >= w.rep_start + 1:
            rep.append((w.rep_start + 1, w.rep_end))
        if w.mem_end >= w.mem_start + 1:
            mem.append((w.mem_start + 1, w.mem_end))
    return rep, mem


def merge_windows(intervals: Sequence[Sequence[int]]) -> List[Interval]:
    """Merge overlapping or adjacent inclusive intervals."""
    if not intervals:
        return []
    ordered = sorted((int(s), int(e)) for s, e in intervals)
    merged = [ordered[0]]
    for start, end in ordered[1:]:
        cur_start, cur_end = merged[-1]
        if start <= cur_end + 1:
            merged[-1] = (cur_start, max(cur_end, end))
        else:
            merged.append((start, end))
    return merged
