"""Pydantic schemas for the REST API."""

from calpinage.web.schemas.requests import OptimizeRequest, PieceSchema
from calpinage.web.schemas.responses import (
    ErrorResponseSchema,
    JobStatusSchema,
    MaterialTagSchema,
    OffcutSchema,
    PanelSchema,
    PlacementSchema,
    ProgressSchema,
    ReportSchema,
    StatsSchema,
    UnplacedPieceSchema,
)

__all__ = [
    # Requests
    "OptimizeRequest",
    "PieceSchema",
    # Responses
    "ErrorResponseSchema",
    "JobStatusSchema",
    "MaterialTagSchema",
    "OffcutSchema",
    "PanelSchema",
    "PlacementSchema",
    "ProgressSchema",
    "ReportSchema",
    "StatsSchema",
    "UnplacedPieceSchema",
]
