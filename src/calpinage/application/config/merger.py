"""Merge CLI arguments into a loaded configuration.

Precedence is CLI args > config values > defaults. Only non-None CLI
arguments override configuration values.
"""

from pathlib import Path
from typing import Any

from calpinage.application.config.schema import (
    CalpinageConfiguration,
    OptimizerConfig,
    OutputConfig,
    PanelConfig,
)


def merge_config_with_cli(
    config: CalpinageConfiguration,
    *,
    width: float | None = None,
    height: float | None = None,
    allow_rotation: bool | None = None,
    max_duration: float | None = None,
    stability_threshold: float | None = None,
    seed: int | None = None,
    output_format: str | None = None,
    output_file: str | Path | None = None,
) -> CalpinageConfiguration:
    """Merge CLI arguments with configuration values.

    Args:
        config: The base configuration to merge with
        width: Override for panel.width
        height: Override for panel.height
        allow_rotation: Override for optimizer.allow_rotation
        max_duration: Override for optimizer.max_duration
        stability_threshold: Override for optimizer.stability_threshold
        seed: Override for optimizer.seed
        output_format: Override for output.format
        output_file: Override for output.file

    Returns:
        A new CalpinageConfiguration with merged values

    Raises:
        pydantic.ValidationError: If the merged values are invalid.

    Example:
        >>> merged = merge_config_with_cli(config, width=2440.0)
        >>> merged.panel.width
        2440.0
    """
    panel_data = config.panel.model_dump()
    _override(panel_data, width=width, height=height)

    optimizer_data = config.optimizer.model_dump()
    _override(
        optimizer_data,
        allow_rotation=allow_rotation,
        max_duration=max_duration,
        stability_threshold=stability_threshold,
        seed=seed,
    )
    # A shorter CLI time budget pulls the inherited stability window down with it.
    if max_duration is not None and stability_threshold is None:
        optimizer_data["stability_threshold"] = min(
            optimizer_data["stability_threshold"], max_duration
        )

    output_data = config.output.model_dump()
    _override(
        output_data,
        format=output_format,
        file=str(output_file) if output_file is not None else None,
    )

    return CalpinageConfiguration(
        schema_version=config.schema_version,
        panel=PanelConfig.model_validate(panel_data),
        optimizer=OptimizerConfig.model_validate(optimizer_data),
        output=OutputConfig.model_validate(output_data),
    )


def _override(data: dict[str, Any], **overrides: Any) -> None:
    for key, value in overrides.items():
        if value is not None:
            data[key] = value
