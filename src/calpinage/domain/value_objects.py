"""Immutable value objects for panel cutting.

All dataclasses are frozen so that placed pieces and free rectangles can be
shared between panel copies without aliasing surprises.
"""

from __future__ import annotations

from dataclasses import dataclass

# Standard melamine/chipboard panel in millimetres.
DEFAULT_PANEL_WIDTH = 2800.0
DEFAULT_PANEL_HEIGHT = 2070.0


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in panel-local coordinates."""

    x: float
    y: float
    w: float
    h: float

    @property
    def area(self) -> float:
        return self.w * self.h

    @property
    def x2(self) -> float:
        return self.x + self.w

    @property
    def y2(self) -> float:
        return self.y + self.h

    def intersects(self, other: Rect) -> bool:
        """True if the interiors overlap (touching edges do not count)."""
        return not (
            self.x2 <= other.x
            or other.x2 <= self.x
            or self.y2 <= other.y
            or other.y2 <= self.y
        )

    def contains(self, other: Rect) -> bool:
        """True if ``other`` lies entirely inside this rectangle."""
        return (
            self.x <= other.x
            and self.y <= other.y
            and other.x2 <= self.x2
            and other.y2 <= self.y2
        )


@dataclass(frozen=True)
class PanelSize:
    """Stock panel dimensions.

    Attributes:
        width: Panel extent along x in millimetres.
        height: Panel extent along y in millimetres.
    """

    width: float = DEFAULT_PANEL_WIDTH
    height: float = DEFAULT_PANEL_HEIGHT

    def __post_init__(self) -> None:
        if self.width <= 0:
            raise ValueError("Panel width must be positive")
        if self.height <= 0:
            raise ValueError("Panel height must be positive")

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True)
class Piece:
    """A single physical unit to be cut.

    Quantities are expanded before packing, so every Piece stands for
    exactly one part. ``length`` runs along the panel width (x) and
    ``width`` along the panel height (y) when placed unrotated.

    Attributes:
        id: Unique identifier of this unit (e.g. ``"Door-0"``).
        reference: Human readable label shared by all units of a row.
        length: First dimension in millimetres.
        width: Second dimension in millimetres.
        thickness: Material thickness in millimetres.
        finish: Surface finish / decor name.
    """

    id: str
    reference: str
    length: float
    width: float
    thickness: float = 19.0
    finish: str = "Std"

    def __post_init__(self) -> None:
        if self.length <= 0 or self.width <= 0:
            raise ValueError(
                f"Piece '{self.id}' dimensions must be positive "
                f"(got {self.length}x{self.width})"
            )

    @property
    def area(self) -> float:
        return self.length * self.width

    @property
    def longest_side(self) -> float:
        return max(self.length, self.width)

    def fits_in(self, width: float, height: float, allow_rotation: bool) -> bool:
        """Check whether the piece fits an empty width x height area."""
        if self.length <= width and self.width <= height:
            return True
        return allow_rotation and self.width <= width and self.length <= height


@dataclass(frozen=True)
class PlacedPiece:
    """A piece bound to a position on a panel.

    Attributes:
        piece: The piece that was placed.
        x: Left edge of the footprint.
        y: Top edge of the footprint.
        width: Footprint extent along x (accounts for rotation).
        height: Footprint extent along y (accounts for rotation).
        rotated: True if the piece was turned 90 degrees.
    """

    piece: Piece
    x: float
    y: float
    width: float
    height: float
    rotated: bool = False

    def __post_init__(self) -> None:
        if self.x < 0 or self.y < 0:
            raise ValueError("Position coordinates must be non-negative")

    @property
    def rotation(self) -> int:
        """Rotation in degrees (0 or 90)."""
        return 90 if self.rotated else 0

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def footprint(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class MaterialTag:
    """Material attached to a panel once its group is known."""

    thickness: float
    finish: str
    label: str
