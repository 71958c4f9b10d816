"""Infrastructure layer - packing, ingestion, formatters and exporters."""

from .bin_packing import (
    DEFAULT_MIN_OFFCUT_AREA,
    GuillotinePacker,
    PackingConfig,
    PackingResult,
)
from .exporters import (
    CsvPlacementExporter,
    Exporter,
    ExporterRegistry,
    JsonReportExporter,
)
from .formatters import PieceListFormatter, ResultSummaryFormatter
from .ingestion import (
    normalize_rows,
    parse_number,
    read_pieces,
    read_rows,
    write_template,
)

__all__ = [
    # Bin packing
    "DEFAULT_MIN_OFFCUT_AREA",
    "GuillotinePacker",
    "PackingConfig",
    "PackingResult",
    # Exporters
    "CsvPlacementExporter",
    "Exporter",
    "ExporterRegistry",
    "JsonReportExporter",
    # Formatters
    "PieceListFormatter",
    "ResultSummaryFormatter",
    # Ingestion
    "normalize_rows",
    "parse_number",
    "read_pieces",
    "read_rows",
    "write_template",
]
