"""Background optimization jobs."""

from fastapi import APIRouter

from calpinage.web.dependencies import JobRegistryDep
from calpinage.web.exceptions import JobNotFinishedError, JobNotFoundError
from calpinage.web.jobs import Job
from calpinage.web.routers.optimize import build_engine
from calpinage.web.schemas.requests import OptimizeRequest
from calpinage.web.schemas.responses import JobStatusSchema, ReportSchema

router = APIRouter(prefix="/jobs", tags=["jobs"])


def _status(job: Job) -> JobStatusSchema:
    stop_reason = job.engine.stop_reason
    return JobStatusSchema(
        job_id=job.id,
        state=job.state.value,
        created_at=job.created_at,
        piece_count=job.piece_count,
        progress=job.last_progress.to_dict() if job.last_progress else None,
        stop_reason=stop_reason.value if stop_reason else None,
    )


def _get_job(registry: JobRegistryDep, job_id: str) -> Job:
    job = registry.get(job_id)
    if job is None:
        raise JobNotFoundError(job_id)
    return job


@router.post("", response_model=JobStatusSchema, status_code=202)
async def create_job(request: OptimizeRequest, registry: JobRegistryDep) -> JobStatusSchema:
    """Start an optimization in the background and return its id."""
    pieces = request.to_pieces()
    job = registry.start(build_engine(request.to_configuration()), pieces)
    return _status(job)


@router.get("/{job_id}", response_model=JobStatusSchema)
async def get_job(job_id: str, registry: JobRegistryDep) -> JobStatusSchema:
    """Current state and latest progress of a job."""
    return _status(_get_job(registry, job_id))


@router.post("/{job_id}/stop", response_model=JobStatusSchema)
async def stop_job(job_id: str, registry: JobRegistryDep) -> JobStatusSchema:
    """Ask a job to stop; the best plan so far becomes its result."""
    job = _get_job(registry, job_id)
    job.engine.stop()
    return _status(job)


@router.get("/{job_id}/result", response_model=ReportSchema)
async def get_job_result(job_id: str, registry: JobRegistryDep) -> dict:
    """Cutting plan of a finished job.

    Raises:
        JobNotFinishedError: While the job is still running (409).
    """
    job = _get_job(registry, job_id)
    if job.result is None:
        raise JobNotFinishedError(job_id, job.state.value)
    return job.result.to_dict()
