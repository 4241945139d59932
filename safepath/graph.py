"""
graph.py — alignment graph model

An AlignmentGraph is the read-only snapshot produced by the upstream
alignment engine for one (representative, member) pair:

  * the two raw sequences,
  * a set of weighted edges between matrix positions (rep, mem),
  * the index-paired safety windows (one list per axis),
  * optionally, the engine's optimal path used as a comparison baseline.

Positions are matrix coordinates: (i, j) means i representative and
j member characters have been consumed, so 0 <= i <= len(representative)
and 0 <= j <= len(member).
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .geometry import is_monotonic, is_self_loop

logger = logging.getLogger(__name__)

Position = Tuple[int, int]
EdgeKey = Tuple[int, int, int, int]


class GraphInputError(ValueError):
    """Upstream payload is empty or structurally unusable."""


# ---------------------------------------------------------------------------
# Edges and windows
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Edge:
    """
    A weighted transition between two matrix positions.

    Attributes
    ----------
    start, end : (int, int)
        Source and target positions (rep, mem).
    probability : float
        Posterior probability of the transition, in [0, 1].

    Two edges are the *same edge* when their coordinates agree; the
    probability is carried along but never used for identity.  Use
    `key` for membership tests.
    """
    start: Position
    end: Position
    probability: float = 1.0

    @property
    def key(self) -> EdgeKey:
        return (self.start[0], self.start[1], self.end[0], self.end[1])

    @property
    def delta(self) -> Tuple[int, int]:
        return (self.end[0] - self.start[0], self.end[1] - self.start[1])

    @property
    def is_self_loop(self) -> bool:
        return is_self_loop(self.start, self.end)

    @property
    def is_monotonic(self) -> bool:
        return is_monotonic(self.start, self.end)

    @classmethod
    def from_coords(cls, fr: Sequence[int], to: Sequence[int], probability: float = 1.0) -> "Edge":
        return cls(
            start=(int(fr[0]), int(fr[1])),
            end=(int(to[0]), int(to[1])),
            probability=float(probability),
        )


@dataclass(frozen=True)
class SafetyWindow:
    """
    A diagonal band flagged by the upstream engine as confidently aligned.

    rep_start..rep_end on the representative axis is paired with
    mem_start..mem_end on the member axis.  For a well-formed window the
    offset mem_start - rep_start equals mem_end - rep_end.
    """
    rep_start: int
    rep_end: int
    mem_start: int
    mem_end: int

    def __post_init__(self):
        if self.rep_end < self.rep_start:
            raise ValueError(
                f"Invalid window: rep_end={self.rep_end} < rep_start={self.rep_start}"
            )
        if self.mem_end < self.mem_start:
            raise ValueError(
                f"Invalid window: mem_end={self.mem_end} < mem_start={self.mem_start}"
            )

    @property
    def offset(self) -> int:
        return self.mem_start - self.rep_start

    @property
    def is_diagonal(self) -> bool:
        return self.mem_end - self.rep_end == self.offset

    @property
    def rep_interval(self) -> Tuple[int, int]:
        return (self.rep_start, self.rep_end)

    @property
    def mem_interval(self) -> Tuple[int, int]:
        return (self.mem_start, self.mem_end)


def pair_windows(
    rep_windows: Sequence[Sequence[int]],
    mem_windows: Sequence[Sequence[int]],
) -> List[SafetyWindow]:
    """
    Combine the two index-paired window lists into SafetyWindow objects.

    The i-th entry of each list describes the same diagonal band.
    """
    if len(rep_windows) != len(mem_windows):
        raise ValueError(
            f"Window lists are not index-paired: {len(rep_windows)} representative "
            f"vs {len(mem_windows)} member windows"
        )
    return [
        SafetyWindow(int(r[0]), int(r[1]), int(m[0]), int(m[1]))
        for r, m in zip(rep_windows, mem_windows)
    ]


def split_windows(
    windows: Sequence[SafetyWindow],
) -> Tuple[List[Tuple[int, int]], List[Tuple[int, int]]]:
    """Inverse of pair_windows: two parallel (start, end) lists."""
    return [w.rep_interval for w in windows], [w.mem_interval for w in windows]


# ---------------------------------------------------------------------------
# Graph snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AlignmentGraph:
    """
    Immutable snapshot of one pairwise alignment graph.

    Attributes
    ----------
    representative, member : str
        Ungapped sequences; the rep axis indexes `representative`.
    edges : tuple of Edge
        Every transition supplied by the upstream engine, in input order.
    windows : tuple of SafetyWindow
        Safety windows in matrix coordinates.
    reference_path : tuple of Edge
        The engine's optimal path, used only as a comparison baseline.
        May be empty.
    """
    representative: str
    member: str
    edges: Tuple[Edge, ...]
    windows: Tuple[SafetyWindow, ...] = ()
    reference_path: Tuple[Edge, ...] = ()

    _outgoing: Dict[Position, Tuple[Edge, ...]] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )
    _by_key: Dict[EdgeKey, Edge] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self):
        if not self.representative or not self.member:
            raise GraphInputError(
                f"Empty sequence: representative length={len(self.representative)}, "
                f"member length={len(self.member)}"
            )
        if not self.edges:
            raise GraphInputError("Alignment graph has no edges")

        object.__setattr__(self, "edges", tuple(self.edges))
        object.__setattr__(self, "windows", tuple(self.windows))
        object.__setattr__(self, "reference_path", tuple(self.reference_path))

        n, m = len(self.representative), len(self.member)
        outgoing: Dict[Position, List[Edge]] = {}
        by_key: Dict[EdgeKey, Edge] = {}
        for idx, edge in enumerate(self.edges):
            if not 0.0 <= edge.probability <= 1.0:
                raise GraphInputError(
                    f"Edge {idx} from {edge.start} to {edge.end} has probability "
                    f"{edge.probability} outside [0, 1]"
                )
            if edge.is_self_loop:
                raise GraphInputError(f"Edge {idx} at {edge.start} is a self-loop")
            if not edge.is_monotonic:
                raise GraphInputError(
                    f"Edge {idx} from {edge.start} to {edge.end} moves backwards"
                )
            if not (0 <= edge.start[0] and 0 <= edge.start[1]
                    and edge.end[0] <= n and edge.end[1] <= m):
                raise GraphInputError(
                    f"Edge {idx} from {edge.start} to {edge.end} lies outside "
                    f"the {n}x{m} alignment matrix"
                )
            outgoing.setdefault(edge.start, []).append(edge)
            by_key.setdefault(edge.key, edge)

        object.__setattr__(self, "_outgoing", {p: tuple(es) for p, es in outgoing.items()})
        object.__setattr__(self, "_by_key", by_key)

    @property
    def rep_len(self) -> int:
        return len(self.representative)

    @property
    def mem_len(self) -> int:
        return len(self.member)

    @property
    def origin(self) -> Position:
        return (0, 0)

    @property
    def terminus(self) -> Position:
        return (self.rep_len, self.mem_len)

    @property
    def edge_keys(self) -> frozenset:
        return frozenset(self._by_key)

    @property
    def adjacency(self) -> Mapping[Position, Tuple[Edge, ...]]:
        """Read-only view of {position: outgoing edges}."""
        return MappingProxyType(self._outgoing)

    def outgoing(self, position: Position) -> Tuple[Edge, ...]:
        """Edges leaving `position`, in input order."""
        return self._outgoing.get(tuple(position), ())

    def contains(self, edge: Edge) -> bool:
        return edge.key in self._by_key

    def probability_of(self, start: Position, end: Position) -> Optional[float]:
        edge = self._by_key.get((start[0], start[1], end[0], end[1]))
        return None if edge is None else edge.probability

    # -----------------------------------------------------------------------
    # Upstream payload decoding
    # -----------------------------------------------------------------------

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "AlignmentGraph":
        """
        Build a graph from the upstream engine's decoded JSON payload.

        Recognised keys
        ---------------
        representative_string, member_string : str
        alignment_graph : list or dict
            Array form  [{"from": [x, y], "edges": [[tx, ty, p], ...]}, ...]
            or object form {"(x,y)": ["((tx,ty),p)", ...], ...}.
        windows_representative, windows_member : list
            [[s, e], ...] or ["(s,e)", ...]; index-paired.
        optimal_path : list of [x, y], optional
        """
        try:
            representative = str(payload["representative_string"])
            member = str(payload["member_string"])
            raw_graph = payload["alignment_graph"]
        except KeyError as exc:
            raise GraphInputError(f"Payload is missing required key {exc}") from exc

        parsed = _parse_edges(raw_graph)
        edges = [e for e in parsed if not e.is_self_loop]
        if len(edges) != len(parsed):
            logger.debug("Dropped %d self-loop edges from payload", len(parsed) - len(edges))

        rep_raw = payload.get("windows_representative") or []
        mem_raw = payload.get("windows_member") or []
        rep_intervals = _parse_intervals(rep_raw)
        mem_intervals = _parse_intervals(mem_raw)
        try:
            windows = pair_windows(rep_intervals, mem_intervals)
        except ValueError as exc:
            raise GraphInputError(f"Invalid safety windows: {exc}") from exc
        for idx, window in enumerate(windows):
            if not window.is_diagonal:
                logger.warning("Safety window %d is not a diagonal band: %s", idx, window)

        graph = cls(representative=representative, member=member, edges=tuple(edges),
                    windows=tuple(windows))

        points = payload.get("optimal_path")
        if points:
            reference = edges_from_points(points, graph)
            graph = cls(representative=representative, member=member,
                        edges=graph.edges, windows=graph.windows,
                        reference_path=tuple(reference))
        return graph

    @classmethod
    def from_json(cls, text: str) -> "AlignmentGraph":
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise GraphInputError(f"Payload is not valid JSON: {exc}") from exc
        return cls.from_payload(payload)


# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------

_POINT_RE = re.compile(r"\(\s*(\d+)\s*,\s*(\d+)\s*\)")
_EDGE_RE = re.compile(r"\(\(\s*(\d+)\s*,\s*(\d+)\s*\)\s*,\s*([0-9.eE+-]+)\s*\)")


def _parse_edges(raw: Any) -> List[Edge]:
    edges: List[Edge] = []
    if isinstance(raw, list):
        for idx, node in enumerate(raw):
            try:
                fr = node["from"]
                for tx, ty, p in node["edges"]:
                    edges.append(Edge.from_coords(fr, (tx, ty), p))
            except (KeyError, TypeError, ValueError) as exc:
                raise GraphInputError(f"Malformed graph node {idx}: {node!r}") from exc
    elif isinstance(raw, Mapping):
        for coord, targets in raw.items():
            match = _POINT_RE.fullmatch(str(coord).strip())
            if match is None:
                raise GraphInputError(f"Unparseable graph node {coord!r}")
            fr = (int(match.group(1)), int(match.group(2)))
            for text in targets:
                edge_match = _EDGE_RE.fullmatch(str(text).strip())
                if edge_match is None:
                    raise GraphInputError(f"Unparseable edge {text!r} at node {coord!r}")
                tx, ty, p = edge_match.groups()
                edges.append(Edge.from_coords(fr, (int(tx), int(ty)), float(p)))
    else:
        raise GraphInputError(
            f"alignment_graph must be a list or mapping, got {type(raw).__name__}"
        )
    return edges


def _parse_intervals(raw: Sequence[Any]) -> List[Tuple[int, int]]:
    intervals: List[Tuple[int, int]] = []
    for item in raw:
        if isinstance(item, str):
            match = _POINT_RE.fullmatch(item.strip())
            if match is None:
                raise GraphInputError(f"Unparseable window {item!r}")
            intervals.append((int(match.group(1)), int(match.group(2))))
        else:
            try:
                start, end = item
                intervals.append((int(start), int(end)))
            except (TypeError, ValueError) as exc:
                raise GraphInputError(f"Malformed window {item!r}") from exc
    return intervals


def edges_from_points(
    points: Sequence[Sequence[int]],
    graph: Optional[AlignmentGraph] = None,
) -> List[Edge]:
    """
    Convert a point path [(x0, y0), (x1, y1), ...] into contiguous edges.

    Probabilities come from `graph` when the edge exists there, else 1.0.
    Repeated consecutive points are skipped.
    """
    edges: List[Edge] = []
    for a, b in zip(points[:-1], points[1:]):
        start = (int(a[0]), int(a[1]))
        end = (int(b[0]), int(b[1]))
        if start == end:
            continue
        prob = graph.probability_of(start, end) if graph is not None else None
        edges.append(Edge(start, end, 1.0 if prob is None else prob))
    return edges
