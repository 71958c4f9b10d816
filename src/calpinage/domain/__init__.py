"""Domain layer - panels, pieces and material groups."""

from .entities import PanelSolution
from .exceptions import (
    CalpinageError,
    IngestionError,
    OptimizerError,
    PackingError,
)
from .services import MaterialGroup, group_key, group_pieces
from .value_objects import (
    DEFAULT_PANEL_HEIGHT,
    DEFAULT_PANEL_WIDTH,
    MaterialTag,
    PanelSize,
    Piece,
    PlacedPiece,
    Rect,
)

__all__ = [
    "CalpinageError",
    "DEFAULT_PANEL_HEIGHT",
    "DEFAULT_PANEL_WIDTH",
    "IngestionError",
    "MaterialGroup",
    "MaterialTag",
    "OptimizerError",
    "PackingError",
    "PanelSize",
    "PanelSolution",
    "Piece",
    "PlacedPiece",
    "Rect",
    "group_key",
    "group_pieces",
]
