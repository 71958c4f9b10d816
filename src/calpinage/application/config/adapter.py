"""Convert configuration models into optimizer inputs."""

import random

from calpinage.application.config.schema import CalpinageConfiguration
from calpinage.application.optimizer import OptimizerOptions
from calpinage.domain.value_objects import PanelSize


def config_to_options(config: CalpinageConfiguration) -> OptimizerOptions:
    """Build OptimizerOptions from a validated configuration.

    Example:
        >>> options = config_to_options(load_config(Path("calpinage.json")))
        >>> options.panel.width
        2800.0
    """
    optimizer = config.optimizer
    return OptimizerOptions(
        panel=PanelSize(width=config.panel.width, height=config.panel.height),
        allow_rotation=optimizer.allow_rotation,
        min_offcut_area=optimizer.min_offcut_area,
        max_duration=optimizer.max_duration,
        stability_threshold=optimizer.stability_threshold,
        yield_interval=optimizer.yield_interval,
        shuffle_probability=optimizer.shuffle_probability,
    )


def config_to_rng(config: CalpinageConfiguration) -> random.Random:
    """Random source for the run; seeded when the configuration sets a seed."""
    return random.Random(config.optimizer.seed)
