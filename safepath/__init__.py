"""
safepath: alignment path graphs and interactive path reconstruction.
"""

# =============================================================================
# GRAPH MODEL
# =============================================================================

from .graph import (
    AlignmentGraph,
    Edge,
    GraphInputError,
    SafetyWindow,
    edges_from_points,
    pair_windows,
    split_windows,
)

from .geometry import (
    diagonal_mask,
    find_edges_near_point,
    is_monotonic,
    on_window_diagonal,
    point_to_segment_distance,
)


# =============================================================================
# PATHS
# =============================================================================

from .path_builder import (
    BreadthFirstSearch,
    BridgeMode,
    BuildOutcome,
    BuildStatus,
    GreedySearch,
    PathSearch,
    SelectedPath,
    bridge_through_selected,
    extend_from_edge,
)

from .validation import (
    check_alignment_strings,
    check_path,
    validate_path,
)

from .reconstruct import (
    AlignmentResult,
    InvalidPathError,
    align_point_path,
    reconstruct_alignment,
)

from .distance import (
    PathComparison,
    compare_paths,
    distance_from_reference,
)


# =============================================================================
# SAFETY WINDOWS AND COVERAGE
# =============================================================================

from .windows import (
    merge_windows,
    position_windows,
    project,
    project_windows,
    to_sequence_windows,
    traversal_points,
)

from .coverage import (
    CoverageTable,
    coverage_counts,
    gap_regions,
)


# =============================================================================
# SESSION
# =============================================================================

from .session import PathSession


__all__ = [
    # Graph model
    "AlignmentGraph",
    "Edge",
    "GraphInputError",
    "SafetyWindow",
    "edges_from_points",
    "pair_windows",
    "split_windows",
    # Geometry
    "diagonal_mask",
    "find_edges_near_point",
    "is_monotonic",
    "on_window_diagonal",
    "point_to_segment_distance",
    # Paths
    "BreadthFirstSearch",
    "BridgeMode",
    "BuildOutcome",
    "BuildStatus",
    "GreedySearch",
    "PathSearch",
    "SelectedPath",
    "bridge_through_selected",
    "extend_from_edge",
    "check_alignment_strings",
    "check_path",
    "validate_path",
    "AlignmentResult",
    "InvalidPathError",
    "align_point_path",
    "reconstruct_alignment",
    "PathComparison",
    "compare_paths",
    "distance_from_reference",
    # Safety windows and coverage
    "merge_windows",
    "position_windows",
    "project",
    "project_windows",
    "to_sequence_windows",
    "traversal_points",
    "CoverageTable",
    "coverage_counts",
    "gap_regions",
    # Session
    "PathSession",
]
