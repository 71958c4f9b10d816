"""CSV export with one row per placed piece, for saw operators."""

from __future__ import annotations

import csv
import io
from typing import TYPE_CHECKING, ClassVar

from calpinage.infrastructure.exporters.base import Exporter, ExporterRegistry

if TYPE_CHECKING:
    from calpinage.application.optimizer import OptimizationResult


def _number(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


CSV_HEADERS = (
    "panel",
    "thickness",
    "finish",
    "piece_id",
    "reference",
    "x",
    "y",
    "width",
    "height",
    "rotation",
)


@ExporterRegistry.register("csv")
class CsvPlacementExporter(Exporter):
    """Placed pieces in panel order, then placement order."""

    format_name: ClassVar[str] = "csv"
    file_extension: ClassVar[str] = "csv"

    def __init__(self, delimiter: str = ",") -> None:
        self.delimiter = delimiter

    def export_string(self, result: OptimizationResult) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, delimiter=self.delimiter, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for panel in result.panels:
            material = panel.material
            thickness = _number(material.thickness) if material else ""
            finish = material.finish if material else ""
            for placed in panel.pieces:
                writer.writerow(
                    (
                        panel.number,
                        thickness,
                        finish,
                        placed.piece.id,
                        placed.piece.reference,
                        _number(placed.x),
                        _number(placed.y),
                        _number(placed.width),
                        _number(placed.height),
                        placed.rotation,
                    )
                )
        return buffer.getvalue()
