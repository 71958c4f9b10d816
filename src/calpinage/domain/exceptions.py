"""Exception hierarchy for the calpinage domain."""

from __future__ import annotations


class CalpinageError(Exception):
    """Base class for all calpinage errors."""


class PackingError(CalpinageError):
    """Raised when the packer detects a violated invariant.

    Normal packing never raises this: oversize pieces are reported in the
    packing result. It signals an internal bug, such as placing onto a
    finalized panel or a pass that makes no progress.
    """


class OptimizerError(CalpinageError):
    """Raised when the optimizer engine is misused (e.g. started twice)."""


class IngestionError(CalpinageError):
    """Raised when a piece list file cannot be read.

    Attributes:
        path: The offending file, if any.
    """

    def __init__(self, message: str, path: object | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        return self.message
