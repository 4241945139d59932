"""
reconstruct.py — gapped alignment from a path through the graph

Each edge (i, j) -> (i + dr, j + dm) contributes columns to the aligned
pair:

    (1, 1) : representative[i] over member[j]      (aligned pair)
    (1, 0) : representative[i] over a gap           (gap in member)
    (0, 1) : a gap over member[j]                   (gap in representative)
    other  : dr representative/gap columns, then dm gap/member columns

The multi-unit ordering is a fixed tie-break so that the output is
deterministic; it carries no biological meaning.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from . import default
from .distance import distance_from_reference
from .geometry import is_monotonic
from .graph import Edge, edges_from_points
from .validation import check_path


class InvalidPathError(ValueError):
    """Reconstruction was asked to run on a path that failed validation."""


@dataclass
class AlignmentResult:
    """
    Gapped alignment derived from a path.

    Attributes
    ----------
    aligned_representative, aligned_member : str
        Equal-length strings with '-' marking gaps.
    score : float
        Mean probability of the traversed edges, in [0, 1].
    path_length : int
        Number of edges in the path.
    distance_from_reference : float
        Percentage distance from the reference path, in [0, 100].
    rep_range, mem_range : (int, int)
        Half-open ranges of the ungapped sequences covered by the path.
    """
    aligned_representative: str
    aligned_member: str
    score: float
    path_length: int
    distance_from_reference: float = 0.0
    rep_range: Tuple[int, int] = (0, 0)
    mem_range: Tuple[int, int] = (0, 0)

    def __post_init__(self):
        if len(self.aligned_representative) != len(self.aligned_member):
            raise ValueError(
                f"Aligned strings differ in length: {len(self.aligned_representative)} "
                f"vs {len(self.aligned_member)}"
            )

    def __len__(self) -> int:
        return len(self.aligned_representative)

    def ungapped(self) -> Tuple[str, str]:
        gap = default.GAP_CHAR
        return (
            self.aligned_representative.replace(gap, ""),
            self.aligned_member.replace(gap, ""),
        )

    @property
    def identity(self) -> float:
        """Fraction of columns holding identical, non-gap characters."""
        if not self.aligned_representative:
            return 0.0
        same = sum(
            1
            for r, m in zip(self.aligned_representative, self.aligned_member)
            if r == m and r != default.GAP_CHAR
        )
        return same / len(self.aligned_representative)


def _emit(
    edge: Edge,
    representative: str,
    member: str,
    out_rep: List[str],
    out_mem: List[str],
) -> None:
    gap = default.GAP_CHAR
    i, j = edge.start
    dr, dm = edge.delta
    if dr == 1 and dm == 1:
        out_rep.append(representative[i])
        out_mem.append(member[j])
    elif dr == 1 and dm == 0:
        out_rep.append(representative[i])
        out_mem.append(gap)
    elif dr == 0 and dm == 1:
        out_rep.append(gap)
        out_mem.append(member[j])
    else:
        for k in range(dr):
            out_rep.append(representative[i + k])
            out_mem.append(gap)
        for k in range(dm):
            out_rep.append(gap)
            out_mem.append(member[j + k])


def _check_bounds(edges: Sequence[Edge], rep_len: int, mem_len: int) -> None:
    for idx, edge in enumerate(edges):
        if min(edge.start) < 0 or edge.end[0] > rep_len or edge.end[1] > mem_len:
            raise InvalidPathError(
                f"Edge {idx} from {edge.start} to {edge.end} lies outside the "
                f"{rep_len}x{mem_len} alignment matrix"
            )


def reconstruct_alignment(
    path,
    representative: str,
    member: str,
    available_edges=None,
    reference_path: Optional[Sequence[Edge]] = None,
) -> AlignmentResult:
    """
    Convert a validated path into a gapped sequence pair and a score.

    Parameters
    ----------
    path : SelectedPath
        Path to reconstruct.
    representative, member : str
        Ungapped sequences (rep axis, mem axis).
    available_edges : AlignmentGraph or iterable of Edge, optional
        Edge set the path must come from.  If omitted, only direction and
        contiguity are checked (the path is validated against itself).
    reference_path : sequence of Edge, optional
        If given, distance_from_reference is filled in.

    Raises
    ------
    InvalidPathError
        If the path fails validation or leaves the alignment matrix.
    """
    pool = available_edges if available_edges is not None else path.edges
    valid, message = check_path(path, pool)
    if not valid:
        raise InvalidPathError(message)
    _check_bounds(path.edges, len(representative), len(member))

    out_rep: List[str] = []
    out_mem: List[str] = []
    for edge in path.edges:
        _emit(edge, representative, member, out_rep, out_mem)

    score = float(np.mean([e.probability for e in path.edges]))
    distance = (
        distance_from_reference(path.edges, reference_path)
        if reference_path is not None
        else 0.0
    )
    first, last = path.edges[0].start, path.edges[-1].end
    return AlignmentResult(
        aligned_representative="".join(out_rep),
        aligned_member="".join(out_mem),
        score=score,
        path_length=len(path.edges),
        distance_from_reference=distance,
        rep_range=(first[0], last[0]),
        mem_range=(first[1], last[1]),
    )


def align_point_path(
    points: Sequence[Sequence[int]],
    representative: str,
    member: str,
) -> Tuple[str, str]:
    """
    Gapped sequence pair for a path given as matrix points.

    Used for the engine's optimal path, which arrives as a list of
    [x, y] points rather than edges.  Moves decompose as in
    reconstruct_alignment.
    """
    edges = edges_from_points(points)
    for idx, edge in enumerate(edges):
        if not is_monotonic(edge.start, edge.end):
            raise InvalidPathError(
                f"Step {idx} from {edge.start} to {edge.end} moves backwards"
            )
    _check_bounds(edges, len(representative), len(member))

    out_rep: List[str] = []
    out_mem: List[str] = []
    for edge in edges:
        _emit(edge, representative, member, out_rep, out_mem)
    return "".join(out_rep), "".join(out_mem)
