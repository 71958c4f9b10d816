"""In-memory registry of background optimization jobs."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence

from calpinage.application import (
    EngineState,
    OptimizationResult,
    OptimizerEngine,
    ProgressEvent,
)
from calpinage.domain.value_objects import Piece

logger = logging.getLogger(__name__)

DEFAULT_MAX_FINISHED = 100


@dataclass
class Job:
    """One optimization running on the server's event loop.

    The job is its own progress observer: it keeps the latest progress
    event and, once finished, the result.
    """

    id: str
    engine: OptimizerEngine
    piece_count: int
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    last_progress: ProgressEvent | None = None
    result: OptimizationResult | None = None
    task: asyncio.Task[OptimizationResult] | None = None

    @property
    def state(self) -> EngineState:
        return self.engine.state

    @property
    def finished(self) -> bool:
        return self.result is not None

    def on_progress(self, event: ProgressEvent) -> None:
        self.last_progress = event

    def on_complete(self, result: OptimizationResult) -> None:
        self.result = result


class JobRegistry:
    """Keeps jobs, and strong references to their tasks, by id.

    Running jobs are always kept. Once more than ``max_finished`` jobs have
    finished, the oldest finished ones are dropped when the next job starts.
    """

    def __init__(self, max_finished: int = DEFAULT_MAX_FINISHED) -> None:
        self.max_finished = max_finished
        self._jobs: dict[str, Job] = {}

    def start(self, engine: OptimizerEngine, pieces: Sequence[Piece]) -> Job:
        """Start ``engine`` on the running loop and register the job.

        Must be called from within the event loop.
        """
        self._evict_finished()
        job = Job(id=uuid.uuid4().hex, engine=engine, piece_count=len(pieces))
        job.task = engine.start(pieces, observer=job)
        job.task.add_done_callback(self._log_failure)
        self._jobs[job.id] = job
        logger.info("Started job %s with %d pieces", job.id, len(pieces))
        return job

    def get(self, job_id: str) -> Job | None:
        return self._jobs.get(job_id)

    def __len__(self) -> int:
        return len(self._jobs)

    def _evict_finished(self) -> None:
        finished = [job_id for job_id, job in self._jobs.items() if job.finished]
        for job_id in finished[: max(0, len(finished) - self.max_finished)]:
            del self._jobs[job_id]
            logger.debug("Evicted finished job %s", job_id)

    @staticmethod
    def _log_failure(task: asyncio.Task[OptimizationResult]) -> None:
        if task.cancelled():
            logger.warning("Optimization job task was cancelled")
        elif task.exception() is not None:
            logger.error("Optimization job crashed", exc_info=task.exception())
