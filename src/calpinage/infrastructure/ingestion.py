"""Piece list ingestion from spreadsheets and JSON files.

Workshop cut lists come from spreadsheets with loosely named columns
(``LONGUEUR``, ``L``, ``Length``...). This module maps those aliases onto
piece fields, parses numbers written with decimal commas or units, expands
quantities into one Piece per physical part and drops rows that cannot be
cut.

Supported inputs:
- ``.csv``: first row is the header, ``,`` or ``;`` delimited
- ``.xlsx``: first worksheet, first row is the header
- ``.json``: a list of row objects, or ``{"pieces": [...]}``
"""

from __future__ import annotations

import csv
import json
import logging
import re
import zipfile
from pathlib import Path
from typing import Any, Iterable, Mapping

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from calpinage.domain.exceptions import IngestionError
from calpinage.domain.value_objects import Piece

logger = logging.getLogger(__name__)

# Field name -> accepted column headers (matched case-insensitively).
COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "reference": ("DENOMINATION", "Reference", "Ref"),
    "length": ("LONGUEUR", "L", "Length"),
    "width": ("LARGEUR", "W", "Width"),
    "thickness": ("EPAISSEUR", "E", "Thickness"),
    "quantity": ("QUANTITE", "Qte", "Q", "Quantity"),
    "finish": ("FINITION", "Finish"),
}

DEFAULT_FINISH = "Std"

TEMPLATE_HEADERS = ("DENOMINATION", "LONGUEUR", "LARGEUR", "EPAISSEUR", "QUANTITE", "FINITION")
TEMPLATE_ROW = ("Exemple", 800, 400, 19, 5, "BLANC")

_NON_NUMERIC = re.compile(r"[^\d.\-]")


def parse_number(value: Any) -> float:
    """Parse a spreadsheet cell as a number.

    Accepts decimal commas and ignores units or stray characters
    (``"19,5 mm"`` -> 19.5). Empty or unparsable values give 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    cleaned = _NON_NUMERIC.sub("", str(value).replace(",", "."))
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def _get_value(row: Mapping[str, Any], field_name: str) -> Any:
    lowered = {str(k).strip().lower(): v for k, v in row.items() if k is not None}
    for alias in COLUMN_ALIASES[field_name]:
        value = lowered.get(alias.lower())
        if value not in (None, ""):
            return value
    return None


def expand_quantity(
    reference: str,
    length: float,
    width: float,
    thickness: float,
    finish: str,
    quantity: int,
) -> list[Piece]:
    """Create one Piece per physical part, with ids ``"{reference}-{i}"``."""
    return [
        Piece(
            id=f"{reference}-{i}",
            reference=reference,
            length=length,
            width=width,
            thickness=thickness,
            finish=finish,
        )
        for i in range(quantity)
    ]


def normalize_rows(rows: Iterable[Mapping[str, Any]]) -> list[Piece]:
    """Convert raw spreadsheet rows into expanded pieces.

    Rows with a non-positive length or width, or a negative quantity, are
    skipped with a warning. A missing reference becomes ``P-{row index}``
    and a missing finish becomes ``Std``. A missing, zero or unparsable
    quantity counts as 1.

    Args:
        rows: Mappings of column header to cell value.

    Returns:
        Expanded pieces in row order.
    """
    pieces: list[Piece] = []
    for index, row in enumerate(rows):
        reference = _get_value(row, "reference")
        reference = str(reference).strip() if reference is not None else f"P-{index}"
        length = parse_number(_get_value(row, "length"))
        width = parse_number(_get_value(row, "width"))
        thickness = parse_number(_get_value(row, "thickness"))
        quantity = int(parse_number(_get_value(row, "quantity"))) or 1
        finish = _get_value(row, "finish")
        finish = str(finish).strip() if finish is not None else DEFAULT_FINISH

        if length <= 0 or width <= 0 or quantity <= 0:
            logger.warning(
                "Skipping row %d ('%s'): length=%s width=%s quantity=%s",
                index,
                reference,
                length,
                width,
                quantity,
            )
            continue

        pieces.extend(
            expand_quantity(reference, length, width, thickness, finish, quantity)
        )

    logger.info("Normalized %d pieces", len(pieces))
    return pieces


def read_rows(path: Path) -> list[dict[str, Any]]:
    """Read raw rows from a CSV, XLSX or JSON file.

    Raises:
        IngestionError: If the file is missing, unreadable or of an
            unsupported type.
    """
    if not path.exists():
        raise IngestionError(f"File not found: {path}", path=path)

    suffix = path.suffix.lower()
    try:
        if suffix == ".csv":
            return _read_csv(path)
        if suffix in (".xlsx", ".xlsm"):
            return _read_xlsx(path)
        if suffix == ".json":
            return _read_json(path)
    except (
        OSError,
        UnicodeDecodeError,
        csv.Error,
        json.JSONDecodeError,
        zipfile.BadZipFile,
        InvalidFileException,
    ) as e:
        raise IngestionError(f"Cannot read {path}: {e}", path=path) from e

    raise IngestionError(
        f"Unsupported file type '{path.suffix}' (expected .csv, .xlsx or .json)",
        path=path,
    )


def read_pieces(path: Path) -> list[Piece]:
    """Read and normalize a piece list file."""
    return normalize_rows(read_rows(path))


def _read_csv(path: Path) -> list[dict[str, Any]]:
    text = path.read_text(encoding="utf-8-sig")
    delimiter = ";" if text.count(";") > text.count(",") else ","
    return list(csv.DictReader(text.splitlines(), delimiter=delimiter))


def _read_xlsx(path: Path) -> list[dict[str, Any]]:
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        rows = sheet.iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return []
        keys = [str(h) if h is not None else "" for h in header]
        return [dict(zip(keys, values)) for values in rows if any(v is not None for v in values)]
    finally:
        workbook.close()


def _read_json(path: Path) -> list[dict[str, Any]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("pieces", [])
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        raise IngestionError("JSON input must be a list of row objects", path=path)
    return data


def write_template(path: Path) -> None:
    """Write a one-row example piece list as CSV or XLSX."""
    if path.suffix.lower() == ".xlsx":
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "Modele"
        sheet.append(TEMPLATE_HEADERS)
        sheet.append(TEMPLATE_ROW)
        workbook.save(path)
    else:
        with path.open("w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(TEMPLATE_HEADERS)
            writer.writerow(TEMPLATE_ROW)
    logger.info("Wrote piece list template to %s", path)
