"""FastAPI dependency injection for optimization services."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from calpinage.web.jobs import JobRegistry


@lru_cache(maxsize=1)
def get_job_registry() -> JobRegistry:
    """Get the process-wide job registry."""
    return JobRegistry()


# Type aliases for cleaner endpoint signatures
JobRegistryDep = Annotated[JobRegistry, Depends(get_job_registry)]
