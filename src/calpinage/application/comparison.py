"""Total order over candidate panel lists for one material group."""

from __future__ import annotations

from typing import Sequence

from calpinage.domain.entities import PanelSolution

# Utilization differences within this many percentage points are a tie.
UTILIZATION_EPSILON = 0.01


def mean_utilization(panels: Sequence[PanelSolution]) -> float:
    """Average per-panel utilization, 0.0 for an empty list."""
    if not panels:
        return 0.0
    return sum(p.utilization for p in panels) / len(panels)


def largest_offcut_area(panels: Sequence[PanelSolution]) -> float:
    """Area of the single largest offcut across all panels."""
    return max((p.largest_offcut_area for p in panels), default=0.0)


def is_better(
    candidate: Sequence[PanelSolution],
    best: Sequence[PanelSolution],
    epsilon: float = UTILIZATION_EPSILON,
) -> bool:
    """Decide whether ``candidate`` should replace ``best``.

    Criteria in priority order:

    1. Fewer panels wins, regardless of utilization.
    2. Higher mean utilization wins when the difference exceeds ``epsilon``.
    3. A strictly larger single offcut wins.

    Args:
        candidate: Panels from the latest packing attempt.
        best: Current best panels for the group.
        epsilon: Utilization tie band in percentage points.

    Returns:
        True only if the candidate is strictly better.
    """
    if len(candidate) != len(best):
        return len(candidate) < len(best)

    candidate_util = mean_utilization(candidate)
    best_util = mean_utilization(best)
    if candidate_util > best_util + epsilon:
        return True
    if candidate_util < best_util - epsilon:
        return False

    return largest_offcut_area(candidate) > largest_offcut_area(best)
