"""JSON report of an optimization run."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, ClassVar

from calpinage.infrastructure.exporters.base import Exporter, ExporterRegistry

if TYPE_CHECKING:
    from calpinage.application.optimizer import OptimizationResult


# Bumped whenever the report layout changes.
SCHEMA_VERSION = "1.0"


@ExporterRegistry.register("json")
class JsonReportExporter(Exporter):
    """Full result as JSON: every panel with pieces and offcuts, plus stats.

    Attributes:
        format_name: "json"
        file_extension: "json"
    """

    format_name: ClassVar[str] = "json"
    file_extension: ClassVar[str] = "json"

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def export_string(self, result: OptimizationResult) -> str:
        data = {"schema_version": SCHEMA_VERSION, **result.to_dict()}
        return json.dumps(data, indent=self.indent, default=str)
