"""
default.py — Default parameters for safepath

Loop guards, hit-test radius and the bridging failure mode used
throughout the package, examples and tests.
"""

# Hard bound on the number of edges in an extended path.
MAX_STEPS = 10_000

# Edge hit-test radius, in graph (matrix) units.
CLICK_THRESHOLD = 0.5

GAP_CHAR = "-"

## Bridging failure mode: "fail_fast" or "best_effort"
BRIDGE_MODE = "fail_fast"


def builder_params(*, best_effort: bool = False) -> dict:
    """
    Bundle default path-building parameters into a dict for easy unpacking.

    Parameters:
        best_effort (bool): If True, bridging returns the partial path
            assembled before a failed segment instead of an empty one.

    Usage:
        outcome = bridge_through_selected(sel, edges, n, m, **builder_params())"""
    return {
        "max_steps": MAX_STEPS,
        "mode": "best_effort" if best_effort else BRIDGE_MODE,
    }
