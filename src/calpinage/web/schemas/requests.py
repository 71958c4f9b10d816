"""Pydantic request schemas for the REST API."""

from pydantic import BaseModel, Field

from calpinage.application.config import (
    CalpinageConfiguration,
    OptimizerConfig,
    PanelConfig,
)
from calpinage.domain.value_objects import Piece
from calpinage.infrastructure.ingestion import expand_quantity


class PieceSchema(BaseModel):
    """One piece list row; expanded into ``quantity`` pieces."""

    reference: str = Field(default="P", min_length=1, description="Piece reference")
    length: float = Field(..., gt=0, le=10000, description="Length in mm")
    width: float = Field(..., gt=0, le=10000, description="Width in mm")
    thickness: float = Field(default=19.0, gt=0, le=200, description="Thickness in mm")
    finish: str = Field(default="Std", min_length=1, description="Finish / decor")
    quantity: int = Field(default=1, ge=1, le=10000, description="Number of pieces")


class OptimizeRequest(BaseModel):
    """Request body for synchronous optimization and job creation."""

    pieces: list[PieceSchema] = Field(..., description="Piece list rows")
    panel: PanelConfig = Field(
        default_factory=PanelConfig, description="Stock panel size"
    )
    options: OptimizerConfig = Field(
        default_factory=OptimizerConfig, description="Optimizer parameters"
    )

    def to_pieces(self) -> list[Piece]:
        pieces: list[Piece] = []
        for row in self.pieces:
            pieces.extend(
                expand_quantity(
                    row.reference,
                    row.length,
                    row.width,
                    row.thickness,
                    row.finish,
                    row.quantity,
                )
            )
        return pieces

    def to_configuration(self) -> CalpinageConfiguration:
        return CalpinageConfiguration(
            schema_version="1.0", panel=self.panel, optimizer=self.options
        )
