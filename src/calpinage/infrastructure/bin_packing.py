"""Guillotine bin packing onto fixed-size stock panels.

This module implements a binary-tree free-space packer: every placement
consumes one free rectangle and splits the remaining L-shaped space into at
most two new free rectangles with a single guillotine cut. Pieces are placed
with the Best-Short-Side-Fit heuristic over all free rectangles.

The packer is deterministic: the same ordered input always produces the
same layouts. Ordering strategies live in the optimizer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from calpinage.domain.entities import PanelSolution
from calpinage.domain.exceptions import PackingError
from calpinage.domain.value_objects import PanelSize, Piece, PlacedPiece, Rect

logger = logging.getLogger(__name__)

# Free rectangles at least this large (mm²) are kept as reusable offcuts.
DEFAULT_MIN_OFFCUT_AREA = 50_000.0


@dataclass(frozen=True)
class PackingConfig:
    """Configuration for a packing run.

    Attributes:
        panel: Stock panel dimensions.
        allow_rotation: Whether pieces may be turned 90 degrees. Disabled
            when the panel decor has a grain that must be respected.
        min_offcut_area: Minimum area for a leftover to count as an offcut.
    """

    panel: PanelSize = field(default_factory=PanelSize)
    allow_rotation: bool = True
    min_offcut_area: float = DEFAULT_MIN_OFFCUT_AREA

    def __post_init__(self) -> None:
        if self.min_offcut_area < 0:
            raise ValueError("Minimum offcut area must be non-negative")


@dataclass(frozen=True)
class _Fit:
    """Best placement candidate for one piece."""

    rect_index: int
    width: float
    height: float
    rotated: bool
    score: float


@dataclass
class PackingResult:
    """Outcome of one packing run.

    Attributes:
        panels: Finalized panels in the order they were opened.
        oversized: Pieces that cannot fit an empty panel in any allowed
            orientation. They are reported here and never packed.
    """

    panels: list[PanelSolution]
    oversized: tuple[Piece, ...] = ()

    @property
    def panel_count(self) -> int:
        return len(self.panels)

    @property
    def placed_count(self) -> int:
        return sum(len(panel.pieces) for panel in self.panels)


class GuillotinePacker:
    """Fill panels one at a time using BSSF placement and guillotine splits.

    For each panel, pieces are tried in input order. A piece that does not
    fit anywhere on the current panel is deferred to the next one. Once the
    input is exhausted the panel is finalized and a new panel is opened for
    the deferred pieces.

    Attributes:
        config: Panel size, rotation policy and offcut threshold.
    """

    def __init__(self, config: PackingConfig) -> None:
        self.config = config

    def pack(self, pieces: Sequence[Piece]) -> PackingResult:
        """Pack pieces in the given order.

        Args:
            pieces: Pieces in placement-priority order.

        Returns:
            PackingResult with the finalized panels and any oversized pieces.

        Raises:
            PackingError: If a pass over the remaining pieces places nothing,
                which would otherwise loop forever.
        """
        remaining, oversized = self._screen_oversized(pieces)
        panels: list[PanelSolution] = []

        while remaining:
            panel = PanelSolution(self.config.panel.width, self.config.panel.height)
            deferred: list[Piece] = []

            for piece in remaining:
                fit = self._find_best_fit(piece, panel.free_rects)
                if fit is None:
                    deferred.append(piece)
                else:
                    self._place_piece(panel, piece, fit)

            if not panel.pieces:
                raise PackingError(
                    f"No progress packing {len(deferred)} pieces "
                    f"(first: '{deferred[0].id}')"
                )

            panel.finalize(self.config.min_offcut_area)
            panels.append(panel)
            logger.debug(
                "Panel %d: %d pieces, %.1f%% used, %d offcuts",
                len(panels),
                len(panel.pieces),
                panel.utilization,
                len(panel.offcuts),
            )
            remaining = deferred

        return PackingResult(panels=panels, oversized=tuple(oversized))

    def _screen_oversized(
        self, pieces: Sequence[Piece]
    ) -> tuple[list[Piece], list[Piece]]:
        """Split pieces into packable ones and ones larger than the panel."""
        panel = self.config.panel
        packable: list[Piece] = []
        oversized: list[Piece] = []
        for piece in pieces:
            if piece.fits_in(panel.width, panel.height, self.config.allow_rotation):
                packable.append(piece)
            else:
                logger.warning(
                    "Piece '%s' (%sx%s) exceeds panel %sx%s, not packed",
                    piece.id,
                    piece.length,
                    piece.width,
                    panel.width,
                    panel.height,
                )
                oversized.append(piece)
        return packable, oversized

    def _find_best_fit(self, piece: Piece, free_rects: list[Rect]) -> _Fit | None:
        """Best Short Side Fit over every free rectangle.

        The score is the smaller leftover dimension after placement. Only a
        strictly better score replaces the current best, so ties go to the
        first rectangle and orientation encountered.
        """
        best: _Fit | None = None

        for index, rect in enumerate(free_rects):
            orientations = [(piece.length, piece.width, False)]
            if self.config.allow_rotation:
                orientations.append((piece.width, piece.length, True))

            for width, height, rotated in orientations:
                if width > rect.w or height > rect.h:
                    continue
                score = min(abs(rect.w - width), abs(rect.h - height))
                if best is None or score < best.score:
                    best = _Fit(index, width, height, rotated, score)

        return best

    def _place_piece(self, panel: PanelSolution, piece: Piece, fit: _Fit) -> None:
        """Place a piece in its free rectangle and split the leftover space."""
        rect = panel.free_rects[fit.rect_index]
        placement = PlacedPiece(
            piece=piece,
            x=rect.x,
            y=rect.y,
            width=fit.width,
            height=fit.height,
            rotated=fit.rotated,
        )
        panel.place(fit.rect_index, placement, self._split(rect, fit.width, fit.height))

    @staticmethod
    def _split(rect: Rect, used_w: float, used_h: float) -> list[Rect]:
        """Split the space left around a placement in the top-left corner.

        Vertical split: a full-height strip on the right and a strip above
        the piece as wide as the piece. Horizontal split: a full-width strip
        above and a strip right of the piece as tall as the piece. The split
        whose larger rectangle is bigger wins.
        """
        extra_w = rect.w - used_w
        extra_h = rect.h - used_h

        vertical_max = max(extra_w * rect.h, used_w * extra_h)
        horizontal_max = max(extra_w * used_h, rect.w * extra_h)

        splits: list[Rect] = []
        if vertical_max > horizontal_max:
            if extra_w > 0:
                splits.append(Rect(rect.x + used_w, rect.y, extra_w, rect.h))
            if extra_h > 0:
                splits.append(Rect(rect.x, rect.y + used_h, used_w, extra_h))
        else:
            if extra_h > 0:
                splits.append(Rect(rect.x, rect.y + used_h, rect.w, extra_h))
            if extra_w > 0:
                splits.append(Rect(rect.x + used_w, rect.y, extra_w, used_h))
        return splits
