"""Configuration schema and loading for optimization runs.

Public API:
    - CalpinageConfiguration: Root configuration model
    - PanelConfig, OptimizerConfig, OutputConfig: Section models
    - load_config / load_config_from_dict: Load and validate configuration
    - ConfigError: Exception for configuration errors
    - merge_config_with_cli: Apply non-None CLI overrides
    - config_to_options / config_to_rng: Build optimizer inputs

Example:
    >>> from pathlib import Path
    >>> from calpinage.application.config import load_config, ConfigError
    >>>
    >>> try:
    ...     config = load_config(Path("calpinage.json"))
    ... except ConfigError as e:
    ...     print(f"Error: {e}")
"""

from calpinage.application.config.adapter import config_to_options, config_to_rng
from calpinage.application.config.loader import (
    ConfigError,
    load_config,
    load_config_from_dict,
)
from calpinage.application.config.merger import merge_config_with_cli
from calpinage.application.config.schema import (
    SUPPORTED_VERSIONS,
    CalpinageConfiguration,
    OptimizerConfig,
    OutputConfig,
    PanelConfig,
)

__all__ = [
    "SUPPORTED_VERSIONS",
    "CalpinageConfiguration",
    "ConfigError",
    "OptimizerConfig",
    "OutputConfig",
    "PanelConfig",
    "config_to_options",
    "config_to_rng",
    "load_config",
    "load_config_from_dict",
    "merge_config_with_cli",
]
