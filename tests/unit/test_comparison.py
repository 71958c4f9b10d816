"""Unit tests for candidate comparison."""

from __future__ import annotations

import pytest

from calpinage.application.comparison import (
    UTILIZATION_EPSILON,
    is_better,
    largest_offcut_area,
    mean_utilization,
)
from calpinage.domain.entities import PanelSolution
from calpinage.domain.value_objects import Piece, PlacedPiece, Rect


def _panel(used_w: float, used_h: float, offcut: Rect | None = None) -> PanelSolution:
    """A finalized 100x100 panel with one placed piece."""
    piece = Piece(id="p", reference="p", length=used_w, width=used_h)
    return PanelSolution(
        width=100,
        height=100,
        pieces=[PlacedPiece(piece, 0, 0, used_w, used_h)],
        offcuts=[offcut] if offcut else [],
        finalized=True,
    )


class TestMetrics:
    """Tests for mean_utilization and largest_offcut_area."""

    def test_mean_utilization(self) -> None:
        assert mean_utilization([_panel(100, 50), _panel(100, 100)]) == pytest.approx(75.0)

    def test_mean_utilization_of_no_panels_is_zero(self) -> None:
        assert mean_utilization([]) == 0.0

    def test_largest_offcut_across_panels(self) -> None:
        panels = [
            _panel(50, 100, offcut=Rect(50, 0, 50, 100)),
            _panel(80, 100, offcut=Rect(80, 0, 20, 100)),
        ]

        assert largest_offcut_area(panels) == 5000

    def test_largest_offcut_without_offcuts(self) -> None:
        assert largest_offcut_area([_panel(100, 100)]) == 0.0


class TestIsBetter:
    """Tests for the candidate ordering."""

    def test_fewer_panels_wins_even_with_lower_utilization(self) -> None:
        candidate = [_panel(10, 10)]
        best = [_panel(100, 100), _panel(100, 100)]

        assert is_better(candidate, best)
        assert not is_better(best, candidate)

    def test_higher_utilization_wins_with_same_panel_count(self) -> None:
        assert is_better([_panel(100, 90)], [_panel(100, 80)])
        assert not is_better([_panel(100, 80)], [_panel(100, 90)])

    def test_utilization_within_epsilon_is_a_tie(self) -> None:
        """A 0.005 point gain alone does not replace the best."""
        candidate = [_panel(100, 80.005)]
        best = [_panel(100, 80)]

        assert UTILIZATION_EPSILON == 0.01
        assert not is_better(candidate, best)

    def test_tie_broken_by_larger_offcut(self) -> None:
        candidate = [_panel(100, 50, offcut=Rect(0, 50, 100, 50))]
        best = [_panel(100, 50, offcut=Rect(0, 50, 50, 50))]

        assert is_better(candidate, best)
        assert not is_better(best, candidate)

    def test_identical_candidates_are_not_better(self) -> None:
        panels = [_panel(100, 50, offcut=Rect(0, 50, 100, 50))]

        assert not is_better(panels, panels)

    def test_custom_epsilon(self) -> None:
        candidate = [_panel(100, 81)]
        best = [_panel(100, 80)]

        assert is_better(candidate, best, epsilon=0.5)
        assert not is_better(candidate, best, epsilon=2.0)
