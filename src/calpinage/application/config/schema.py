"""Pydantic configuration schema models for optimization runs.

This module defines the configuration schema for JSON-based calpinage
configuration files. It uses Pydantic v2 for validation and serialization.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from calpinage.domain.value_objects import DEFAULT_PANEL_HEIGHT, DEFAULT_PANEL_WIDTH

# Supported schema versions for configuration files
# Version 1.0: Panel, optimizer and output sections
SUPPORTED_VERSIONS: frozenset[str] = frozenset({"1.0"})


class PanelConfig(BaseModel):
    """Stock panel dimensions in millimetres."""

    model_config = ConfigDict(extra="forbid")

    width: float = Field(default=DEFAULT_PANEL_WIDTH, gt=0, le=10000)
    height: float = Field(default=DEFAULT_PANEL_HEIGHT, gt=0, le=10000)


class OptimizerConfig(BaseModel):
    """Search parameters for the anytime optimizer.

    Attributes:
        allow_rotation: Whether pieces may be turned 90 degrees.
        min_offcut_area: Free rectangles at least this large (mm2) are kept
            as offcuts; smaller ones count as scrap.
        max_duration: Hard time budget in seconds.
        stability_threshold: Stop after this many seconds without improvement.
        yield_interval: Seconds between cooperative yields.
        shuffle_probability: Chance each iteration shuffles instead of sorting.
        seed: Optional seed for reproducible runs.
    """

    model_config = ConfigDict(extra="forbid")

    allow_rotation: bool = True
    min_offcut_area: float = Field(default=50_000.0, ge=0)
    max_duration: float = Field(default=60.0, gt=0, le=3600)
    stability_threshold: float = Field(default=30.0, gt=0)
    yield_interval: float = Field(default=0.015, ge=0, le=1.0)
    shuffle_probability: float = Field(default=0.6, ge=0, le=1.0)
    seed: int | None = None

    @model_validator(mode="after")
    def validate_stability_within_budget(self) -> "OptimizerConfig":
        """Validate that stability_threshold does not exceed max_duration."""
        if self.stability_threshold > self.max_duration:
            raise ValueError(
                f"stability_threshold ({self.stability_threshold}) cannot exceed "
                f"max_duration ({self.max_duration})"
            )
        return self


class OutputConfig(BaseModel):
    """Output format and optional destination file."""

    model_config = ConfigDict(extra="forbid")

    format: Literal["text", "json", "csv"] = "text"
    file: str | None = None


class CalpinageConfiguration(BaseModel):
    """Root configuration model.

    Example:
        >>> config = CalpinageConfiguration(
        ...     schema_version="1.0",
        ...     panel=PanelConfig(width=2440, height=1220),
        ... )
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(..., pattern=r"^\d+\.\d+$")
    panel: PanelConfig = Field(default_factory=PanelConfig)
    optimizer: OptimizerConfig = Field(default_factory=OptimizerConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @field_validator("schema_version")
    @classmethod
    def validate_supported_version(cls, v: str) -> str:
        """Accept known versions and newer minors of a supported major."""
        if v in SUPPORTED_VERSIONS:
            return v

        major_version = int(v.split(".")[0])
        supported_majors = {int(sv.split(".")[0]) for sv in SUPPORTED_VERSIONS}
        if major_version in supported_majors:
            return v

        raise ValueError(
            f"Unsupported schema version: {v}. "
            f"Supported versions: {', '.join(sorted(SUPPORTED_VERSIONS))}"
        )
