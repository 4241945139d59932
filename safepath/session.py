"""
session.py — one viewer's interactive path state

A PathSession owns the current SelectedPath for a single alignment
graph.  Every user action (click, extend, generate, clear) is a fresh,
independent computation whose result replaces the previous one; nothing
is merged.

Builds go through begin_build() / commit(token, outcome).  A token is
only accepted while it is the newest one, so a build that completes after
a later action (for instance when run on a worker thread for a very large
graph) is discarded instead of overwriting newer state.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple, Union

from . import default
from .geometry import find_edges_near_point
from .graph import AlignmentGraph, Edge, SafetyWindow
from .path_builder import (
    BridgeMode,
    BuildOutcome,
    BuildStatus,
    PathSearch,
    SelectedPath,
    bridge_through_selected,
    extend_from_edge,
)
from .reconstruct import AlignmentResult, reconstruct_alignment
from .windows import position_windows, project_windows

logger = logging.getLogger(__name__)


class PathSession:
    """
    Interactive path state for one AlignmentGraph.

    Parameters
    ----------
    graph : AlignmentGraph
        Immutable snapshot from the upstream engine.
    search : PathSearch, optional
        Search strategy for extension and bridging (GreedySearch default).
    mode : str or BridgeMode
        Bridging failure mode, "fail_fast" or "best_effort".
    max_steps : int
        Loop guard for extension and bridging.
    """

    def __init__(
        self,
        graph: AlignmentGraph,
        search: Optional[PathSearch] = None,
        mode: Union[str, BridgeMode] = default.BRIDGE_MODE,
        max_steps: int = default.MAX_STEPS,
    ):
        self.graph = graph
        self.search = search
        self.mode = BridgeMode(mode)
        self.max_steps = max_steps
        self.path = SelectedPath.empty()
        self.selection: List[Edge] = []
        self.last_outcome: Optional[BuildOutcome] = None
        self.generation = 0

    # -----------------------------------------------------------------------
    # Build bookkeeping
    # -----------------------------------------------------------------------

    def begin_build(self) -> int:
        """Start a build; any earlier token becomes stale."""
        self.generation += 1
        return self.generation

    def commit(self, token: int, outcome: BuildOutcome) -> bool:
        """Install `outcome` as current unless `token` is stale."""
        if token != self.generation:
            logger.debug("Discarding stale build %d (current %d)", token, self.generation)
            return False
        self.path = outcome.path
        self.last_outcome = outcome
        return True

    # -----------------------------------------------------------------------
    # Actions
    # -----------------------------------------------------------------------

    def extend_from(self, edge: Edge) -> BuildOutcome:
        """Replace the current path with a greedy extension from `edge`."""
        if not self.graph.contains(edge):
            return BuildOutcome(
                path=SelectedPath.empty(),
                status=BuildStatus.INVALID_SELECTION,
                message=f"Edge {edge.start} -> {edge.end} is not part of this graph",
                n_selected=1,
            )
        token = self.begin_build()
        path = extend_from_edge(edge, self.graph, max_steps=self.max_steps, search=self.search)
        outcome = BuildOutcome(
            path=path,
            status=BuildStatus.OK,
            message=f"Extended path of {len(path)} edges",
            n_selected=1,
            n_connected=1,
        )
        self.commit(token, outcome)
        return outcome

    def click(
        self,
        point: Sequence[float],
        threshold: float = default.CLICK_THRESHOLD,
    ) -> BuildOutcome:
        """
        Extend from the edge nearest to `point` (graph coordinates).

        Leaves the current path untouched when nothing is within reach.
        """
        hits = find_edges_near_point(point, self.graph.edges, threshold)
        if not hits:
            return BuildOutcome(
                path=SelectedPath.empty(),
                status=BuildStatus.NO_SELECTION,
                message=f"No edge within {threshold} of {tuple(point)}",
            )
        _, edge, _ = min(hits, key=lambda hit: (hit[2], hit[0]))
        return self.extend_from(edge)

    def toggle_selection(self, edge: Edge) -> bool:
        """Add or remove a required edge; returns True if now selected."""
        for idx, chosen in enumerate(self.selection):
            if chosen.key == edge.key:
                del self.selection[idx]
                return False
        self.selection.append(edge)
        return True

    def generate(self) -> BuildOutcome:
        """Replace the current path with one bridging every selected edge."""
        token = self.begin_build()
        outcome = bridge_through_selected(
            self.selection,
            self.graph,
            self.graph.rep_len,
            self.graph.mem_len,
            mode=self.mode,
            search=self.search,
            max_steps=self.max_steps,
        )
        if not outcome.ok:
            logger.info("Path generation: %s", outcome.message)
        self.commit(token, outcome)
        return outcome

    def clear(self) -> None:
        """Drop the current path and selection; in-flight builds go stale."""
        self.begin_build()
        self.path = SelectedPath.empty()
        self.selection = []
        self.last_outcome = None

    # -----------------------------------------------------------------------
    # Derived views
    # -----------------------------------------------------------------------

    def result(self) -> AlignmentResult:
        """
        Alignment for the current path.

        Raises InvalidPathError if the current path does not validate.
        """
        reference = self.graph.reference_path or None
        return reconstruct_alignment(
            self.path,
            self.graph.representative,
            self.graph.member,
            available_edges=self.graph,
            reference_path=reference,
        )

    def reference_result(self) -> Optional[AlignmentResult]:
        """Alignment for the engine's reference path, if one was supplied."""
        if not self.graph.reference_path:
            return None
        ref = SelectedPath(edges=list(self.graph.reference_path), is_valid=True)
        return reconstruct_alignment(ref, self.graph.representative, self.graph.member)

    def projected_windows(self, use_reference: bool = False) -> List[Tuple[int, SafetyWindow]]:
        """
        Safety windows clipped to the viewed path, in 1-indexed residue
        coordinates, paired with their index in graph.windows.
        """
        res = self.reference_result() if use_reference else self.result()
        if res is None:
            return []
        converted = position_windows(self.graph.windows)
        clipped = project_windows(
            res.aligned_representative,
            res.aligned_member,
            [w for _, w in converted],
            origin=(res.rep_range[0], res.mem_range[0]),
        )
        return [(converted[i][0], window) for i, window in clipped]
