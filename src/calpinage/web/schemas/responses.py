"""Pydantic response schemas for the REST API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PlacementSchema(BaseModel):
    """A piece placed on a panel."""

    id: str = Field(..., description="Piece id")
    ref: str = Field(..., description="Piece reference")
    x: float = Field(..., description="Left edge in mm")
    y: float = Field(..., description="Top edge in mm")
    width: float = Field(..., description="Placed width in mm")
    height: float = Field(..., description="Placed height in mm")
    rotation: int = Field(..., description="0 or 90 degrees")


class OffcutSchema(BaseModel):
    """A reusable leftover rectangle."""

    x: float
    y: float
    w: float
    h: float


class MaterialTagSchema(BaseModel):
    """Material shared by every piece on a panel."""

    thickness: float
    finish: str
    label: str


class PanelSchema(BaseModel):
    """One stock panel of the cutting plan."""

    id: int = Field(..., description="Panel number, 1-based")
    width: float
    height: float
    utilization: float = Field(..., description="Used area percentage")
    waste: float = Field(..., description="Unused area in mm2")
    material: MaterialTagSchema | None = None
    pieces: list[PlacementSchema] = Field(default_factory=list)
    offcuts: list[OffcutSchema] = Field(default_factory=list)


class StatsSchema(BaseModel):
    """Summary statistics of a plan."""

    model_config = ConfigDict(populate_by_name=True)

    total_panels: int = Field(..., alias="totalPanels")
    global_utilization: float = Field(..., alias="globalUtilization")
    total_cuts: int = Field(..., alias="totalCuts")
    timestamp: str


class UnplacedPieceSchema(BaseModel):
    """A piece larger than the panel."""

    id: str
    reference: str
    length: float
    width: float


class ReportSchema(BaseModel):
    """Full cutting plan."""

    model_config = ConfigDict(populate_by_name=True)

    panels: list[PanelSchema] = Field(default_factory=list)
    stats: StatsSchema
    unplaced: list[UnplacedPieceSchema] = Field(default_factory=list)
    stop_reason: str = Field(..., alias="stopReason")
    iterations: int


class ProgressSchema(BaseModel):
    """Latest progress event of a job."""

    percent: float
    iteration: int
    time_left: float
    stability: float


class JobStatusSchema(BaseModel):
    """State of a background job."""

    job_id: str
    state: str = Field(..., description="idle, running, stopped or completed")
    created_at: str
    piece_count: int
    progress: ProgressSchema | None = None
    stop_reason: str | None = None


class ErrorResponseSchema(BaseModel):
    """Error response body."""

    error: str
    error_type: str
    details: Any = None
