"""Synchronous optimization endpoint."""

import logging

from fastapi import APIRouter

from calpinage.application import OptimizerEngine, OptimizerOptions
from calpinage.application.config import (
    CalpinageConfiguration,
    config_to_options,
    config_to_rng,
)
from calpinage.web.exceptions import InvalidOptionsError
from calpinage.web.schemas.requests import OptimizeRequest
from calpinage.web.schemas.responses import ReportSchema

logger = logging.getLogger(__name__)

router = APIRouter(tags=["optimize"])


def build_engine(config: CalpinageConfiguration) -> OptimizerEngine:
    """Create an engine for a validated configuration.

    Raises:
        InvalidOptionsError: If the optimizer rejects the options.
    """
    try:
        options: OptimizerOptions = config_to_options(config)
    except ValueError as e:
        raise InvalidOptionsError(str(e)) from e
    return OptimizerEngine(options, rng=config_to_rng(config))


@router.post("/optimize", response_model=ReportSchema)
async def optimize(request: OptimizeRequest) -> dict:
    """Optimize a piece list and return the cutting plan.

    Runs on the server's event loop until the search stops on its own,
    so keep ``options.max_duration`` short for interactive use.
    """
    pieces = request.to_pieces()
    engine = build_engine(request.to_configuration())
    logger.info("Optimize request with %d pieces", len(pieces))
    result = await engine.optimize(pieces)
    return result.to_dict()
