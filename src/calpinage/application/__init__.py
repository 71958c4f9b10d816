"""Application layer - optimizer engine and configuration."""

from .comparison import is_better, largest_offcut_area, mean_utilization
from .optimizer import (
    CallbackObserver,
    EngineState,
    NullObserver,
    OptimizationResult,
    OptimizationStats,
    OptimizerEngine,
    OptimizerOptions,
    ProgressEvent,
    ProgressObserver,
    StopReason,
    optimize,
)
from .perturbation import perturb, shuffle, sort_by_area, sort_by_criterion

__all__ = [
    "CallbackObserver",
    "EngineState",
    "NullObserver",
    "OptimizationResult",
    "OptimizationStats",
    "OptimizerEngine",
    "OptimizerOptions",
    "ProgressEvent",
    "ProgressObserver",
    "StopReason",
    "is_better",
    "largest_offcut_area",
    "mean_utilization",
    "optimize",
    "perturb",
    "shuffle",
    "sort_by_area",
    "sort_by_criterion",
]
