"""
validation.py — structural checks for selected paths and aligned strings

check_path is the single authoritative gate in front of alignment
reconstruction.  A path passes when:

  1. it is flagged valid and holds at least one edge,
  2. every edge exists in the available edge set (coordinate equality),
  3. every edge moves right and/or down (never backwards),
  4. consecutive edges are contiguous: edges[i].end == edges[i+1].start.

Failures are expected outcomes ("cannot build a path"), so they are
reported as (False, message) rather than raised.
"""
from __future__ import annotations

import logging
from typing import Tuple

from . import default
from .geometry import is_monotonic
from .graph import AlignmentGraph

logger = logging.getLogger(__name__)


def check_path(path, available_edges) -> Tuple[bool, str]:
    """
    Check a SelectedPath against the edges of its graph.

    Parameters
    ----------
    path : SelectedPath
        Candidate path.
    available_edges : AlignmentGraph or iterable of Edge
        Edges the path may use.

    Returns
    -------
    valid : bool
        True if the path passes all checks.
    message : str
        Description of what was checked or what failed.
    """
    if not path.is_valid or len(path.edges) == 0:
        msg = f"Path is flagged invalid or empty (is_valid={path.is_valid}, edges={len(path.edges)})"
        logger.debug("Path validation failed: %s", msg)
        return False, msg

    if isinstance(available_edges, AlignmentGraph):
        known = available_edges.edge_keys
    else:
        known = {e.key for e in available_edges}

    for i, edge in enumerate(path.edges):
        if edge.key not in known:
            msg = f"Edge {i} from {edge.start} to {edge.end} does not exist in available edges"
            logger.debug("Path validation failed: %s", msg)
            return False, msg
        if not is_monotonic(edge.start, edge.end):
            msg = f"Edge {i} from {edge.start} to {edge.end} moves backwards"
            logger.debug("Path validation failed: %s", msg)
            return False, msg

    for i, (cur, nxt) in enumerate(zip(path.edges[:-1], path.edges[1:])):
        if cur.end != nxt.start:
            msg = (
                f"Path is not continuous between edge {i} ending at {cur.end} "
                f"and edge {i + 1} starting at {nxt.start}"
            )
            logger.debug("Path validation failed: %s", msg)
            return False, msg

    return True, f"Valid path of {len(path.edges)} edges"


def validate_path(path, available_edges) -> bool:
    """True iff `path` passes check_path against `available_edges`."""
    valid, _ = check_path(path, available_edges)
    return valid


def check_alignment_strings(aligned_rep: str, aligned_mem: str) -> Tuple[bool, str]:
    """
    Check that a gapped sequence pair is well formed.

    Verifies equal length and that no column is a gap in both strings.
    """
    if len(aligned_rep) != len(aligned_mem):
        return False, f"Length mismatch: representative={len(aligned_rep)}, member={len(aligned_mem)}"
    gap = default.GAP_CHAR
    for i, (r, m) in enumerate(zip(aligned_rep, aligned_mem)):
        if r == gap and m == gap:
            return False, f"Double gap found in alignment at position {i}"
    return True, f"Valid alignment of length {len(aligned_rep)}"

