"""Exporter framework for optimization results.

Registered exporters:
- json: Full report with panels, placements, offcuts and statistics
- csv: One row per placed piece

Usage:
    from calpinage.infrastructure.exporters import ExporterRegistry

    exporter = ExporterRegistry.get("json")()
    exporter.export(result, Path("calpinage_export.json"))
"""

from calpinage.infrastructure.exporters.base import Exporter, ExporterRegistry
from calpinage.infrastructure.exporters.csv_placements import CsvPlacementExporter
from calpinage.infrastructure.exporters.json_report import JsonReportExporter

__all__ = [
    "CsvPlacementExporter",
    "Exporter",
    "ExporterRegistry",
    "JsonReportExporter",
]
