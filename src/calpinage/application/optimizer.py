"""Anytime optimizer driving the guillotine packer.

The optimizer seeds every material group with an area-sorted packing and
then keeps re-packing each group with perturbed piece orders, replacing a
group's best layout whenever a candidate wins under :func:`is_better`. It
holds a valid answer at every moment and stops on a time budget, when the
search stops improving, or on request.

The loop is a coroutine that shares a single thread with its host. It
yields to the event loop on a fixed wall-clock cadence, never in the middle
of a perturb-pack-compare cycle, and reports only scalar progress. Layouts
are delivered once, in the completion event.
"""

from __future__ import annotations

import asyncio
import logging
import random
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Protocol, Sequence, runtime_checkable

from calpinage.application.comparison import (
    UTILIZATION_EPSILON,
    is_better,
    mean_utilization,
)
from calpinage.application.perturbation import perturb, sort_by_area
from calpinage.domain.entities import PanelSolution
from calpinage.domain.exceptions import OptimizerError
from calpinage.domain.services.material_grouping import MaterialGroup, group_pieces
from calpinage.domain.value_objects import PanelSize, Piece
from calpinage.infrastructure.bin_packing import (
    DEFAULT_MIN_OFFCUT_AREA,
    GuillotinePacker,
    PackingConfig,
)

logger = logging.getLogger(__name__)

# Progress stays below this until the run has really finished.
MAX_RUNNING_PERCENT = 99.0


class EngineState(str, Enum):
    """Lifecycle of an optimizer engine."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"
    COMPLETED = "completed"


class StopReason(str, Enum):
    """Why the search loop ended."""

    TIMEOUT = "timeout"
    STABILITY = "stability"
    REQUESTED = "requested"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


@dataclass(frozen=True)
class OptimizerOptions:
    """Tuning knobs for an optimization run.

    Attributes:
        panel: Stock panel size shared by every group.
        allow_rotation: Whether pieces may be turned 90 degrees.
        min_offcut_area: Minimum leftover area kept as a reusable offcut.
        max_duration: Hard wall-clock budget in seconds.
        stability_threshold: Stop once no group improved for this long.
        yield_interval: Seconds between yields to the event loop.
        shuffle_probability: Chance an iteration shuffles instead of sorting.
        utilization_epsilon: Tie band for mean utilization comparisons.
    """

    panel: PanelSize = field(default_factory=PanelSize)
    allow_rotation: bool = True
    min_offcut_area: float = DEFAULT_MIN_OFFCUT_AREA
    max_duration: float = 60.0
    stability_threshold: float = 30.0
    yield_interval: float = 0.015
    shuffle_probability: float = 0.6
    utilization_epsilon: float = UTILIZATION_EPSILON

    def __post_init__(self) -> None:
        if self.max_duration <= 0:
            raise ValueError("Maximum duration must be positive")
        if self.stability_threshold <= 0:
            raise ValueError("Stability threshold must be positive")
        if self.stability_threshold > self.max_duration:
            raise ValueError("Stability threshold cannot exceed maximum duration")
        if self.yield_interval < 0:
            raise ValueError("Yield interval must be non-negative")
        if not 0.0 <= self.shuffle_probability <= 1.0:
            raise ValueError("Shuffle probability must be between 0 and 1")
        if self.min_offcut_area < 0:
            raise ValueError("Minimum offcut area must be non-negative")

    def packing_config(self) -> PackingConfig:
        return PackingConfig(
            panel=self.panel,
            allow_rotation=self.allow_rotation,
            min_offcut_area=self.min_offcut_area,
        )


@dataclass(frozen=True)
class ProgressEvent:
    """Scalar progress snapshot. Never carries layouts.

    Attributes:
        percent: Time-based completion estimate, 0-99 while running and
            100 for the final event.
        iteration: Optimizer iterations performed so far.
        time_left: Seconds remaining in the time budget.
        stability: Time since the last improvement divided by the
            stability threshold; the run stops once this exceeds 1.
    """

    percent: float
    iteration: int
    time_left: float
    stability: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "percent": round(self.percent, 2),
            "iteration": self.iteration,
            "time_left": round(self.time_left, 3),
            "stability": round(self.stability, 3),
        }


@dataclass(frozen=True)
class OptimizationStats:
    """Summary numbers for a finished run."""

    total_panels: int
    global_utilization: float
    total_cuts: int
    timestamp: str


@dataclass(frozen=True)
class OptimizationResult:
    """Terminal artifact of an optimization run.

    Attributes:
        panels: Panels of every group, numbered 1..N in group order.
        stats: Summary statistics.
        unplaced: Pieces that could not fit on any panel.
        stop_reason: Why the search ended.
        iterations: Number of optimizer iterations performed.
        elapsed: Run time in seconds.
    """

    panels: tuple[PanelSolution, ...]
    stats: OptimizationStats
    unplaced: tuple[Piece, ...] = ()
    stop_reason: StopReason = StopReason.EXHAUSTED
    iterations: int = 0
    elapsed: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Export shape shared by the JSON report and the web API."""
        return {
            "panels": [_panel_to_dict(panel) for panel in self.panels],
            "stats": {
                "totalPanels": self.stats.total_panels,
                "globalUtilization": self.stats.global_utilization,
                "totalCuts": self.stats.total_cuts,
                "timestamp": self.stats.timestamp,
            },
            "unplaced": [
                {
                    "id": p.id,
                    "reference": p.reference,
                    "length": p.length,
                    "width": p.width,
                }
                for p in self.unplaced
            ],
            "stopReason": self.stop_reason.value,
            "iterations": self.iterations,
        }


def _panel_to_dict(panel: PanelSolution) -> dict[str, Any]:
    material = panel.material
    return {
        "id": panel.number,
        "width": panel.width,
        "height": panel.height,
        "utilization": panel.utilization,
        "waste": panel.waste,
        "material": None
        if material is None
        else {
            "thickness": material.thickness,
            "finish": material.finish,
            "label": material.label,
        },
        "pieces": [
            {
                "id": p.piece.id,
                "ref": p.piece.reference,
                "x": p.x,
                "y": p.y,
                "width": p.width,
                "height": p.height,
                "rotation": p.rotation,
            }
            for p in panel.pieces
        ],
        "offcuts": [{"x": o.x, "y": o.y, "w": o.w, "h": o.h} for o in panel.offcuts],
    }


@runtime_checkable
class ProgressObserver(Protocol):
    """Receives progress events and exactly one completion event."""

    def on_progress(self, event: ProgressEvent) -> None: ...

    def on_complete(self, result: OptimizationResult) -> None: ...


class NullObserver:
    """Observer that ignores every event."""

    def on_progress(self, event: ProgressEvent) -> None:
        pass

    def on_complete(self, result: OptimizationResult) -> None:
        pass


class CallbackObserver:
    """Adapts plain callables to the ProgressObserver protocol."""

    def __init__(
        self,
        on_progress: Callable[[ProgressEvent], None] | None = None,
        on_complete: Callable[[OptimizationResult], None] | None = None,
    ) -> None:
        self._on_progress = on_progress
        self._on_complete = on_complete

    def on_progress(self, event: ProgressEvent) -> None:
        if self._on_progress is not None:
            self._on_progress(event)

    def on_complete(self, result: OptimizationResult) -> None:
        if self._on_complete is not None:
            self._on_complete(result)


@dataclass
class _SearchState:
    """Mutable bookkeeping for one run, owned by the loop."""

    start: float
    last_yield: float
    last_improvement: float
    iteration: int = 0
    best: dict[str, list[PanelSolution]] = field(default_factory=dict)


class OptimizerEngine:
    """Time-boxed local search over piece orderings.

    One engine runs one optimization at a time. ``stop()`` may be called
    from any thread; it is honored at the top of the next iteration.

    Attributes:
        options: Run configuration.
    """

    def __init__(
        self,
        options: OptimizerOptions | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the engine.

        Args:
            options: Run configuration, defaults to OptimizerOptions().
            rng: Random source for perturbations. Pass a seeded instance for
                reproducible runs.
            clock: Monotonic time source in seconds.
        """
        self.options = options or OptimizerOptions()
        self._rng = rng or random.Random()
        self._clock = clock
        self._stop_event = threading.Event()
        self._state = EngineState.IDLE
        self._stop_reason: StopReason | None = None

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def stop_reason(self) -> StopReason | None:
        return self._stop_reason

    def stop(self) -> None:
        """Ask a running optimization to stop. Idempotent."""
        if self._state is EngineState.RUNNING:
            self._stop_event.set()

    def start(
        self,
        pieces: Sequence[Piece],
        observer: ProgressObserver | None = None,
    ) -> asyncio.Task[OptimizationResult]:
        """Schedule a run on the current event loop and return its task."""
        self._begin()
        return asyncio.get_running_loop().create_task(
            self._run(list(pieces), observer or NullObserver())
        )

    async def optimize(
        self,
        pieces: Sequence[Piece],
        observer: ProgressObserver | None = None,
    ) -> OptimizationResult:
        """Run to completion, reporting to ``observer``.

        Args:
            pieces: Expanded, validated pieces of any materials.
            observer: Receives progress and the completion event.

        Returns:
            The same result delivered to ``observer.on_complete``.

        Raises:
            OptimizerError: If this engine is already running.
        """
        self._begin()
        return await self._run(list(pieces), observer or NullObserver())

    def run(
        self,
        pieces: Sequence[Piece],
        observer: ProgressObserver | None = None,
    ) -> OptimizationResult:
        """Blocking wrapper around :meth:`optimize` for scripts and the CLI."""
        return asyncio.run(self.optimize(pieces, observer))

    def _begin(self) -> None:
        if self._state is EngineState.RUNNING:
            raise OptimizerError("Optimizer is already running")
        self._stop_event.clear()
        self._stop_reason = None
        self._state = EngineState.RUNNING

    async def _run(
        self, pieces: list[Piece], observer: ProgressObserver
    ) -> OptimizationResult:
        options = self.options
        packer = GuillotinePacker(options.packing_config())
        now = self._clock()
        search = _SearchState(start=now, last_yield=now, last_improvement=now)

        groups = list(group_pieces(pieces).values())
        unplaced: list[Piece] = []
        for group in groups:
            seed = packer.pack(sort_by_area(group.pieces))
            self._tag(seed.panels, group)
            search.best[group.key] = seed.panels
            unplaced.extend(seed.oversized)

        logger.info(
            "Starting optimization: %d pieces in %d material groups",
            len(pieces),
            len(groups),
        )

        searchable = [g for g in groups if search.best[g.key]]
        try:
            reason = await self._search(searchable, packer, search, observer)
        except asyncio.CancelledError:
            self._complete(StopReason.REQUESTED, groups, search, unplaced, observer)
            raise
        except Exception:
            logger.exception("Optimization loop failed, keeping best result so far")
            reason = StopReason.FAILED

        return self._complete(reason, groups, search, unplaced, observer)

    def _complete(
        self,
        reason: StopReason,
        groups: list[MaterialGroup],
        search: _SearchState,
        unplaced: list[Piece],
        observer: ProgressObserver,
    ) -> OptimizationResult:
        """Deliver the final progress event and the best plan found."""
        options = self.options
        self._stop_reason = reason
        self._state = EngineState.STOPPED
        logger.info(
            "Optimization stopped (%s) after %d iterations",
            reason.value,
            search.iteration,
        )

        elapsed = self._clock() - search.start
        observer.on_progress(
            ProgressEvent(
                percent=100.0,
                iteration=search.iteration,
                time_left=max(0.0, options.max_duration - elapsed),
                stability=self._stability(search),
            )
        )
        result = self._build_result(groups, search, unplaced, reason, elapsed)
        self._finish(reason)
        observer.on_complete(result)
        return result

    async def _search(
        self,
        groups: list[MaterialGroup],
        packer: GuillotinePacker,
        search: _SearchState,
        observer: ProgressObserver,
    ) -> StopReason:
        """Perturb, pack and compare until a stop condition holds."""
        options = self.options
        if not groups:
            return StopReason.EXHAUSTED

        while True:
            if self._stop_event.is_set():
                return StopReason.REQUESTED

            now = self._clock()
            elapsed = now - search.start
            if elapsed > options.max_duration:
                logger.warning("Optimization time budget reached")
                return StopReason.TIMEOUT
            if now - search.last_improvement > options.stability_threshold:
                logger.info("Optimization stabilized, stopping early")
                return StopReason.STABILITY

            search.iteration += 1
            if now - search.last_yield > options.yield_interval:
                await asyncio.sleep(0)
                search.last_yield = self._clock()
                observer.on_progress(
                    ProgressEvent(
                        percent=min(elapsed / options.max_duration * 100, MAX_RUNNING_PERCENT),
                        iteration=search.iteration,
                        time_left=max(0.0, options.max_duration - elapsed),
                        stability=self._stability(search, now),
                    )
                )

            for group in groups:
                self._improve_group(group, packer, search)

    def _improve_group(
        self,
        group: MaterialGroup,
        packer: GuillotinePacker,
        search: _SearchState,
    ) -> None:
        """One perturb-pack-compare cycle for a single group."""
        try:
            ordering = perturb(
                group.pieces,
                search.iteration,
                self._rng,
                self.options.shuffle_probability,
            )
            candidate = packer.pack(ordering).panels
        except Exception:
            logger.exception(
                "Iteration %d failed for group %s", search.iteration, group.key
            )
            return

        if is_better(candidate, search.best[group.key], self.options.utilization_epsilon):
            self._tag(candidate, group)
            search.best[group.key] = candidate
            search.last_improvement = self._clock()
            logger.info(
                "New best for group %s: %d panels, %.2f%% mean utilization",
                group.key,
                len(candidate),
                mean_utilization(candidate),
            )

    def _stability(self, search: _SearchState, now: float | None = None) -> float:
        if now is None:
            now = self._clock()
        return (now - search.last_improvement) / self.options.stability_threshold

    def _finish(self, reason: StopReason) -> None:
        self._stop_reason = reason
        self._state = EngineState.COMPLETED

    @staticmethod
    def _tag(panels: list[PanelSolution], group: MaterialGroup) -> None:
        tag = group.tag
        for panel in panels:
            panel.material = tag

    @staticmethod
    def _build_result(
        groups: list[MaterialGroup],
        search: _SearchState,
        unplaced: list[Piece],
        reason: StopReason,
        elapsed: float,
    ) -> OptimizationResult:
        flattened = [panel for group in groups for panel in search.best[group.key]]
        panels = tuple(
            panel.clone(number=index) for index, panel in enumerate(flattened, start=1)
        )
        stats = OptimizationStats(
            total_panels=len(panels),
            global_utilization=mean_utilization(panels),
            total_cuts=sum(panel.cut_count for panel in panels),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        return OptimizationResult(
            panels=panels,
            stats=stats,
            unplaced=tuple(unplaced),
            stop_reason=reason,
            iterations=search.iteration,
            elapsed=elapsed,
        )


async def optimize(
    pieces: Sequence[Piece],
    options: OptimizerOptions | None = None,
    observer: ProgressObserver | None = None,
    rng: random.Random | None = None,
) -> OptimizationResult:
    """Run a one-off optimization with a fresh engine."""
    return await OptimizerEngine(options, rng=rng).optimize(pieces, observer)
