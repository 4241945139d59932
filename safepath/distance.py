"""
distance.py — how far a custom path strays from the reference path

Both paths are compared as sets of edge coordinates (probabilities are
ignored).  The headline metric is

    distance% = 100 * (1 - |P ∩ R| / max(|P|, |R|))

so 0 means identical edge sets and 100 means fully disjoint.
compare_paths additionally reports the Jaccard distance
100 * (1 - |P ∩ R| / |P ∪ R|) and the per-side counts.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Set

from .graph import Edge, EdgeKey


def _keys(edges: Iterable[Edge]) -> Set[EdgeKey]:
    return {e.key for e in edges}


def distance_from_reference(path_edges: Iterable[Edge], reference_edges: Iterable[Edge]) -> float:
    """
    Percentage distance of a path from the reference path, in [0, 100].

    An empty reference gives 0.0 (nothing to compare against); an empty
    path against a non-empty reference gives 100.0.
    """
    return _distance(_keys(path_edges), _keys(reference_edges))


def _distance(path: Set[EdgeKey], ref: Set[EdgeKey]) -> float:
    if not ref:
        return 0.0
    if not path:
        return 100.0
    shared = len(path & ref)
    return 100.0 * (1.0 - shared / max(len(path), len(ref)))


@dataclass(frozen=True)
class PathComparison:
    """
    Edge-level comparison of a custom path against the reference path.

    Attributes
    ----------
    shared : int
        Edges present in both paths.
    total_path, total_reference : int
        Distinct edges in each path.
    unique_to_path, unique_to_reference : int
        Edges present on one side only.
    distance_percentage : float
        distance_from_reference for the same inputs.
    jaccard_percentage : float
        100 * (1 - shared / union); 0.0 when both are empty.
    """
    shared: int
    total_path: int
    total_reference: int
    unique_to_path: int
    unique_to_reference: int
    distance_percentage: float
    jaccard_percentage: float


def compare_paths(path_edges: Iterable[Edge], reference_edges: Iterable[Edge]) -> PathComparison:
    path, ref = _keys(path_edges), _keys(reference_edges)
    shared = len(path & ref)
    union = len(path | ref)
    jaccard = 100.0 * (1.0 - shared / union) if union else 0.0
    return PathComparison(
        shared=shared,
        total_path=len(path),
        total_reference=len(ref),
        unique_to_path=len(path) - shared,
        unique_to_reference=len(ref) - shared,
        distance_percentage=_distance(path, ref),
        jaccard_percentage=jaccard,
    )
