"""Mutable packing state for a single stock panel."""

from __future__ import annotations

from dataclasses import dataclass, field

from .exceptions import PackingError
from .value_objects import MaterialTag, PlacedPiece, Rect

# Base cuts per panel (trimming the four edges) before any piece cuts.
EDGE_TRIM_CUTS = 4


@dataclass
class PanelSolution:
    """One stock panel being filled by the packer.

    The panel starts with a single free rectangle covering its full area.
    Placements consume free rectangles and replace them with split results,
    so placed footprints plus free rectangles always partition the panel.
    Finalizing moves the leftover free rectangles into ``offcuts`` (large
    enough to reuse) and ``scrap`` (everything else).

    Attributes:
        width: Stock panel width.
        height: Stock panel height.
        pieces: Placed pieces in placement order.
        free_rects: Working set of free rectangles (empty once finalized).
        offcuts: Retained free rectangles at or above the offcut threshold.
        scrap: Leftover free rectangles below the offcut threshold.
        material: Material tag assigned by the caller after packing.
        number: 1-based panel number in the final result.
        finalized: True once no more pieces may be placed.
    """

    width: float
    height: float
    pieces: list[PlacedPiece] = field(default_factory=list)
    free_rects: list[Rect] = field(default_factory=list)
    offcuts: list[Rect] = field(default_factory=list)
    scrap: list[Rect] = field(default_factory=list)
    material: MaterialTag | None = None
    number: int | None = None
    finalized: bool = False

    def __post_init__(self) -> None:
        if not self.free_rects and not self.finalized and not self.pieces:
            self.free_rects = [Rect(0.0, 0.0, self.width, self.height)]

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def used_area(self) -> float:
        return sum(p.area for p in self.pieces)

    @property
    def utilization(self) -> float:
        """Percentage of the panel covered by placed pieces."""
        if self.area == 0:
            return 0.0
        return self.used_area / self.area * 100

    @property
    def waste(self) -> float:
        """Panel area not covered by placed pieces."""
        return self.area - self.used_area

    @property
    def largest_offcut_area(self) -> float:
        return max((o.area for o in self.offcuts), default=0.0)

    @property
    def cut_count(self) -> int:
        """Estimated guillotine cuts for this panel."""
        return EDGE_TRIM_CUTS + len(self.pieces)

    def place(self, rect_index: int, placement: PlacedPiece, splits: list[Rect]) -> None:
        """Record a placement and replace the consumed free rectangle.

        Args:
            rect_index: Index of the free rectangle the piece goes into.
            placement: The placed piece.
            splits: Free rectangles produced by splitting the consumed one.

        Raises:
            PackingError: If the panel was already finalized.
        """
        if self.finalized:
            raise PackingError("Cannot place a piece on a finalized panel")
        self.pieces.append(placement)
        del self.free_rects[rect_index]
        self.free_rects.extend(splits)

    def finalize(self, min_offcut_area: float) -> None:
        """Close the panel, sorting leftover space into offcuts and scrap."""
        self.offcuts = [r for r in self.free_rects if r.area >= min_offcut_area]
        self.scrap = [r for r in self.free_rects if r.area < min_offcut_area]
        self.free_rects = []
        self.finalized = True

    def clone(self, number: int | None = None) -> PanelSolution:
        """Return an independent copy, optionally renumbered."""
        return PanelSolution(
            width=self.width,
            height=self.height,
            pieces=list(self.pieces),
            free_rects=list(self.free_rects),
            offcuts=list(self.offcuts),
            scrap=list(self.scrap),
            material=self.material,
            number=self.number if number is None else number,
            finalized=self.finalized,
        )
