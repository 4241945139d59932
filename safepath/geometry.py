"""
geometry.py — shared geometric predicates on the alignment matrix

Every direction check, diagonal-containment test and point/segment
distance used by the graph model, the path builder, the validator, the
window projector and the click hit-test lives here.

Coordinates are (rep, mem) pairs.  Windows are anything exposing
rep_start, rep_end, mem_start, mem_end (inclusive bounds).
"""
from __future__ import annotations

from typing import Any, Iterable, List, Sequence, Tuple

import numpy as np


def is_monotonic(start: Sequence[int], end: Sequence[int]) -> bool:
    """True if moving start -> end never decreases either coordinate."""
    return end[0] >= start[0] and end[1] >= start[1]


def is_self_loop(start: Sequence[int], end: Sequence[int]) -> bool:
    return start[0] == end[0] and start[1] == end[1]


def within(point: Sequence[int], target: Sequence[int]) -> bool:
    """True if `point` does not overshoot `target` on either axis."""
    return point[0] <= target[0] and point[1] <= target[1]


def point_to_segment_distance(
    point: Sequence[float],
    seg_start: Sequence[float],
    seg_end: Sequence[float],
) -> float:
    """
    Euclidean distance from `point` to the closed segment seg_start--seg_end.

    A zero-length segment degrades to the point-to-point distance.
    """
    p = np.asarray(point, dtype=float)
    a = np.asarray(seg_start, dtype=float)
    b = np.asarray(seg_end, dtype=float)
    ab = b - a
    denom = float(np.dot(ab, ab))
    if denom == 0.0:
        return float(np.hypot(*(p - a)))
    t = float(np.clip(np.dot(p - a, ab) / denom, 0.0, 1.0))
    closest = a + t * ab
    return float(np.hypot(*(p - closest)))


def diagonal_mask(points: np.ndarray, window: Any) -> np.ndarray:
    """
    Boolean mask over an (k, 2) array of points: which lie on the
    diagonal band described by `window`.

    A point must fall within the inclusive bounds on both axes and keep
    the window's constant offset: p - rep_start == q - mem_start.  A
    zero-width window therefore contains exactly its single cell.
    """
    points = np.asarray(points, dtype=int).reshape(-1, 2)
    p, q = points[:, 0], points[:, 1]
    return (
        (p >= window.rep_start) & (p <= window.rep_end)
        & (q >= window.mem_start) & (q <= window.mem_end)
        & (p - window.rep_start == q - window.mem_start)
    )


def on_window_diagonal(point: Sequence[int], window: Any) -> bool:
    """Single-point form of diagonal_mask."""
    return bool(diagonal_mask(np.asarray([point[:2]]), window)[0])


def find_edges_near_point(
    point: Sequence[float],
    edges: Iterable[Any],
    threshold: float,
) -> List[Tuple[int, Any, float]]:
    """
    Hit-test: edges whose segment passes within `threshold` of `point`.

    Returns
    -------
    list of (index, edge, distance)
        In input order; `index` is the edge's position in `edges`.
    """
    hits: List[Tuple[int, Any, float]] = []
    for idx, edge in enumerate(edges):
        dist = point_to_segment_distance(point, edge.start, edge.end)
        if dist <= threshold:
            hits.append((idx, edge, dist))
    return hits
