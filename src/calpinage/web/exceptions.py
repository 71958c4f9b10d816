"""Custom exceptions and error handlers for the REST API."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from calpinage.domain.exceptions import OptimizerError


class JobNotFoundError(Exception):
    """Raised when a job id is unknown."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")


class JobNotFinishedError(Exception):
    """Raised when a result is requested for a job still running."""

    def __init__(self, job_id: str, state: str) -> None:
        self.job_id = job_id
        self.state = state
        super().__init__(f"Job {job_id} has not finished (state: {state})")


class InvalidOptionsError(Exception):
    """Raised when request options are rejected by the optimizer."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers with the FastAPI app."""

    @app.exception_handler(JobNotFoundError)
    async def job_not_found_handler(
        request: Request, exc: JobNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={
                "error": str(exc),
                "error_type": "not_found",
                "details": {"job_id": exc.job_id},
            },
        )

    @app.exception_handler(JobNotFinishedError)
    async def job_not_finished_handler(
        request: Request, exc: JobNotFinishedError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={
                "error": str(exc),
                "error_type": "not_finished",
                "details": {"job_id": exc.job_id, "state": exc.state},
            },
        )

    @app.exception_handler(InvalidOptionsError)
    async def invalid_options_handler(
        request: Request, exc: InvalidOptionsError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "error": exc.message,
                "error_type": "invalid_options",
                "details": None,
            },
        )

    @app.exception_handler(OptimizerError)
    async def optimizer_error_handler(
        request: Request, exc: OptimizerError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={
                "error": str(exc),
                "error_type": "optimizer",
                "details": None,
            },
        )
