"""
path_builder.py — interactive construction of monotonic paths

Two entry points build a SelectedPath through an alignment graph:

  * extend_from_edge        : start at a clicked edge and keep following
                              the most probable outgoing edge.
  * bridge_through_selected : connect origin -> each selected edge ->
                              terminus with search segments.

The search itself is a strategy object (PathSearch).  GreedySearch is the
interactive heuristic ("continue plausibly from where the user clicked");
BreadthFirstSearch finds the shortest connecting segment instead.  Both
can be passed wherever a `search=` argument is accepted.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

import numpy as np

from . import default
from .geometry import is_monotonic, is_self_loop, within
from .graph import AlignmentGraph, Edge, EdgeKey, GraphInputError, Position

logger = logging.getLogger(__name__)

Outgoing = Mapping[Position, Sequence[Edge]]
EdgeSource = Union[AlignmentGraph, Sequence[Edge]]


# ---------------------------------------------------------------------------
# Path and outcome containers
# ---------------------------------------------------------------------------

@dataclass
class SelectedPath:
    """
    An ordered run of edges chosen through the graph.

    Attributes
    ----------
    edges : list of Edge
        Path edges in traversal order.
    is_valid : bool
        Builder's verdict.  A valid path is non-empty and contiguous
        (edges[i].end == edges[i+1].start).
    """
    edges: List[Edge] = field(default_factory=list)
    is_valid: bool = False

    @classmethod
    def empty(cls) -> "SelectedPath":
        return cls(edges=[], is_valid=False)

    def __len__(self) -> int:
        return len(self.edges)

    @property
    def keys(self) -> List[EdgeKey]:
        return [e.key for e in self.edges]

    @property
    def points(self) -> List[Position]:
        if not self.edges:
            return []
        return [self.edges[0].start] + [e.end for e in self.edges]

    @property
    def start(self) -> Optional[Position]:
        return self.edges[0].start if self.edges else None

    @property
    def end(self) -> Optional[Position]:
        return self.edges[-1].end if self.edges else None

    def to_array(self) -> np.ndarray:
        """Visited points as an int32 array of shape (k+1, 2)."""
        pts = self.points
        if not pts:
            return np.empty((0, 2), dtype=np.int32)
        return np.asarray(pts, dtype=np.int32)


class BridgeMode(str, Enum):
    FAIL_FAST = "fail_fast"
    BEST_EFFORT = "best_effort"


class BuildStatus(Enum):
    OK = "ok"
    PARTIAL = "partial"
    NO_SELECTION = "no_selection"
    BRIDGE_FAILED = "bridge_failed"
    INVALID_SELECTION = "invalid_selection"


@dataclass
class BuildOutcome:
    """
    Structured result of a path build, for the interaction layer.

    Attributes
    ----------
    path : SelectedPath
        The built path.  Empty and invalid unless status is OK or PARTIAL.
    status : BuildStatus
    message : str
        Human-readable reason.
    failed_segment : (Position, Position) or None
        The (from, to) pair that could not be connected, if any.
    n_selected : int
        Number of distinct required edges.
    n_connected : int
        How many required edges made it into the path.
    """
    path: SelectedPath
    status: BuildStatus
    message: str = ""
    failed_segment: Optional[Tuple[Position, Position]] = None
    n_selected: int = 0
    n_connected: int = 0

    @property
    def ok(self) -> bool:
        return self.status is BuildStatus.OK


# ---------------------------------------------------------------------------
# Adjacency
# ---------------------------------------------------------------------------

def index_outgoing(edges: Iterable[Edge]) -> Dict[Position, List[Edge]]:
    """Map each position to the edges leaving it, preserving input order."""
    outgoing: Dict[Position, List[Edge]] = {}
    for edge in edges:
        outgoing.setdefault(edge.start, []).append(edge)
    return outgoing


def _adjacency(all_edges: EdgeSource) -> Tuple[Outgoing, Set[EdgeKey]]:
    if isinstance(all_edges, AlignmentGraph):
        return all_edges.adjacency, set(all_edges.edge_keys)
    edges = list(all_edges)
    if not edges:
        raise GraphInputError("Cannot build a path: the edge set is empty")
    return index_outgoing(edges), {e.key for e in edges}


# ---------------------------------------------------------------------------
# Search strategies
# ---------------------------------------------------------------------------

class PathSearch:
    """
    Strategy interface for path search.

    extend(start_edge, outgoing, max_steps) -> list of Edge
        Grow a path from `start_edge` until no candidate remains or the
        path holds `max_steps` edges.  The first edge is `start_edge`.

    connect(start, target, outgoing, used, max_steps) -> list of Edge or None
        A contiguous segment from `start` to exactly `target` that never
        overshoots `target` and avoids edges whose key is in `used`.
        [] when start == target, None when no segment exists.
    """

    def extend(self, start_edge: Edge, outgoing: Outgoing, max_steps: int) -> List[Edge]:
        raise NotImplementedError

    def connect(
        self,
        start: Position,
        target: Position,
        outgoing: Outgoing,
        used: Set[EdgeKey],
        max_steps: int,
    ) -> Optional[List[Edge]]:
        raise NotImplementedError


def _best_candidate(
    candidates: Sequence[Edge],
    used: Set[EdgeKey],
    target: Optional[Position] = None,
) -> Optional[Edge]:
    """Highest-probability admissible edge; ties go to the first seen."""
    best: Optional[Edge] = None
    for edge in candidates:
        if is_self_loop(edge.start, edge.end) or not is_monotonic(edge.start, edge.end):
            continue
        if edge.key in used:
            continue
        if target is not None and not within(edge.end, target):
            continue
        if best is None or edge.probability > best.probability:
            best = edge
    return best


class GreedySearch(PathSearch):
    """Always take the most probable admissible outgoing edge."""

    def extend(self, start_edge: Edge, outgoing: Outgoing, max_steps: int) -> List[Edge]:
        path = [start_edge]
        used = {start_edge.key}
        current = start_edge.end
        while len(path) < max_steps:
            nxt = _best_candidate(outgoing.get(current, ()), used)
            if nxt is None:
                break
            path.append(nxt)
            used.add(nxt.key)
            current = nxt.end
        if len(path) >= max_steps and _best_candidate(outgoing.get(current, ()), used) is not None:
            logger.debug("Extension stopped at the step limit (%d edges)", max_steps)
        return path

    def connect(self, start, target, outgoing, used, max_steps):
        start, target = tuple(start), tuple(target)
        if start == target:
            return []
        if not is_monotonic(start, target):
            return None
        segment: List[Edge] = []
        seen = set(used)
        current = start
        while current != target:
            if len(segment) >= max_steps:
                return None
            nxt = _best_candidate(outgoing.get(current, ()), seen, target)
            if nxt is None:
                return None
            segment.append(nxt)
            seen.add(nxt.key)
            current = nxt.end
        return segment


class BreadthFirstSearch(GreedySearch):
    """
    Shortest connecting segments (fewest edges).

    Extension is inherited from GreedySearch; only the bridging step
    differs.
    """

    def connect(self, start, target, outgoing, used, max_steps):
        start, target = tuple(start), tuple(target)
        if start == target:
            return []
        if not is_monotonic(start, target):
            return None

        parent: Dict[Position, Optional[Edge]] = {start: None}
        depth = {start: 0}
        queue = deque([start])
        while queue:
            point = queue.popleft()
            if point == target:
                break
            if depth[point] >= max_steps:
                continue
            for edge in outgoing.get(point, ()):
                nxt = edge.end
                if (
                    nxt in parent
                    or edge.key in used
                    or is_self_loop(edge.start, nxt)
                    or not is_monotonic(point, nxt)
                    or not within(nxt, target)
                ):
                    continue
                parent[nxt] = edge
                depth[nxt] = depth[point] + 1
                queue.append(nxt)

        if target not in parent:
            return None
        segment: List[Edge] = []
        point = target
        while parent[point] is not None:
            edge = parent[point]
            segment.append(edge)
            point = edge.start
        segment.reverse()
        return segment


DEFAULT_SEARCH = GreedySearch()


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def extend_from_edge(
    start: Edge,
    all_edges: EdgeSource,
    max_steps: int = default.MAX_STEPS,
    search: Optional[PathSearch] = None,
) -> SelectedPath:
    """
    Build a path starting with `start` and greedily extending it.

    Parameters
    ----------
    start : Edge
        The clicked edge; always the first edge of the result.
    all_edges : AlignmentGraph or sequence of Edge
        Edges available for extension.
    max_steps : int
        Loop guard: maximum number of edges in the path.  Reaching it
        simply stops growth.
    search : PathSearch, optional
        Defaults to GreedySearch.

    Returns
    -------
    SelectedPath
        is_valid is True iff at least one edge was included.
    """
    if max_steps < 1:
        raise ValueError(f"max_steps must be >= 1, got {max_steps}")
    outgoing, _ = _adjacency(all_edges)
    search = search or DEFAULT_SEARCH
    edges = search.extend(start, outgoing, max_steps)
    logger.debug("Extended path from %s to %d edges", start.start, len(edges))
    return SelectedPath(edges=edges, is_valid=len(edges) > 0)


def order_selected(selected: Iterable[Edge]) -> List[Edge]:
    """
    Deduplicate (by coordinates, first wins) and order required edges by
    start position: primary key rep+mem, tie-break rep.
    """
    seen: Set[EdgeKey] = set()
    unique: List[Edge] = []
    for edge in selected:
        if edge.key not in seen:
            seen.add(edge.key)
            unique.append(edge)
    return sorted(unique, key=lambda e: (e.start[0] + e.start[1], e.start[0]))


def bridge_through_selected(
    selected: Iterable[Edge],
    all_edges: EdgeSource,
    rep_len: int,
    mem_len: int,
    mode: Union[str, BridgeMode] = default.BRIDGE_MODE,
    search: Optional[PathSearch] = None,
    max_steps: int = default.MAX_STEPS,
) -> BuildOutcome:
    """
    Build a full path (0,0) -> ... -> (rep_len, mem_len) through every
    selected edge.

    Each gap between consecutive waypoints is filled by `search.connect`.
    When a gap cannot be filled:

      * BridgeMode.FAIL_FAST   : the result is an empty, invalid path.
      * BridgeMode.BEST_EFFORT : the contiguous prefix built so far is
                                 returned (valid if non-empty) with
                                 status PARTIAL.

    In both modes the outcome names the segment that failed.
    """
    if rep_len <= 0 or mem_len <= 0:
        raise GraphInputError(
            f"Sequence lengths must be positive, got rep_len={rep_len}, mem_len={mem_len}"
        )
    mode = BridgeMode(mode)
    search = search or DEFAULT_SEARCH
    outgoing, known = _adjacency(all_edges)

    ordered = order_selected(selected)
    n_selected = len(ordered)
    if not ordered:
        return BuildOutcome(
            path=SelectedPath.empty(),
            status=BuildStatus.NO_SELECTION,
            message="No edges selected",
        )

    for edge in ordered:
        if edge.key not in known or edge.is_self_loop or not edge.is_monotonic:
            logger.debug("Rejected selected edge %s -> %s", edge.start, edge.end)
            return BuildOutcome(
                path=SelectedPath.empty(),
                status=BuildStatus.INVALID_SELECTION,
                message=f"Selected edge {edge.start} -> {edge.end} is not a forward edge of this graph",
                n_selected=n_selected,
            )

    terminus = (rep_len, mem_len)
    path: List[Edge] = []
    used: Set[EdgeKey] = set()
    current: Position = (0, 0)
    n_connected = 0

    waypoints: List[Tuple[Position, Optional[Edge]]] = [(e.start, e) for e in ordered]
    waypoints.append((terminus, None))

    for target, required in waypoints:
        segment = search.connect(current, target, outgoing, used, max_steps)
        if segment is None:
            logger.debug("No path connects %s to %s", current, target)
            message = f"No path connects {current} to {target}"
            if mode is BridgeMode.BEST_EFFORT:
                return BuildOutcome(
                    path=SelectedPath(edges=path, is_valid=len(path) > 0),
                    status=BuildStatus.PARTIAL,
                    message=message,
                    failed_segment=(current, target),
                    n_selected=n_selected,
                    n_connected=n_connected,
                )
            return BuildOutcome(
                path=SelectedPath.empty(),
                status=BuildStatus.BRIDGE_FAILED,
                message=message,
                failed_segment=(current, target),
                n_selected=n_selected,
                n_connected=n_connected,
            )
        path.extend(segment)
        used.update(e.key for e in segment)
        current = target
        if required is not None:
            path.append(required)
            used.add(required.key)
            current = required.end
            n_connected += 1

    logger.debug("Bridged %d selected edges into a %d-edge path", n_selected, len(path))
    return BuildOutcome(
        path=SelectedPath(edges=path, is_valid=True),
        status=BuildStatus.OK,
        message=f"Path of {len(path)} edges through {n_selected} selected edges",
        n_selected=n_selected,
        n_connected=n_connected,
    )
