"""Unit tests for piece list ingestion."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook

from calpinage.domain.exceptions import IngestionError
from calpinage.infrastructure.ingestion import (
    TEMPLATE_HEADERS,
    TEMPLATE_ROW,
    expand_quantity,
    normalize_rows,
    parse_number,
    read_pieces,
    read_rows,
    write_template,
)


class TestParseNumber:
    """Tests for parse_number."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (800, 800.0),
            (19.5, 19.5),
            ("800", 800.0),
            ("19,5", 19.5),
            ("19,5 mm", 19.5),
            (" 1200 ", 1200.0),
            ("", 0.0),
            (None, 0.0),
            ("abc", 0.0),
            (True, 0.0),
        ],
    )
    def test_parse(self, value: object, expected: float) -> None:
        assert parse_number(value) == expected


class TestNormalizeRows:
    """Tests for normalize_rows."""

    def test_french_headers(self) -> None:
        rows = [
            {
                "DENOMINATION": "Porte",
                "LONGUEUR": "716",
                "LARGEUR": "396",
                "EPAISSEUR": "19",
                "QUANTITE": "2",
                "FINITION": "BLANC",
            }
        ]

        pieces = normalize_rows(rows)

        assert [p.id for p in pieces] == ["Porte-0", "Porte-1"]
        assert pieces[0].length == 716
        assert pieces[0].width == 396
        assert pieces[0].thickness == 19
        assert pieces[0].finish == "BLANC"

    def test_short_aliases_are_case_insensitive(self) -> None:
        rows = [{"ref": "Shelf", "l": 764, "w": 540, "e": 18, "q": 3, "finish": "Oak"}]

        pieces = normalize_rows(rows)

        assert len(pieces) == 3
        assert pieces[0].reference == "Shelf"
        assert pieces[0].thickness == 18
        assert pieces[0].finish == "Oak"

    def test_defaults_for_missing_columns(self) -> None:
        pieces = normalize_rows([{"Length": 500, "Width": 300}])

        assert len(pieces) == 1
        assert pieces[0].reference == "P-0"
        assert pieces[0].id == "P-0-0"
        assert pieces[0].finish == "Std"

    def test_invalid_rows_skipped_with_warning(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        rows = [
            {"Ref": "ok", "L": 500, "W": 300},
            {"Ref": "no-length", "L": "", "W": 300},
            {"Ref": "negative-qty", "L": 500, "W": 300, "Q": -2},
            {"Ref": "negative", "L": -5, "W": 300},
        ]

        with caplog.at_level(logging.WARNING):
            pieces = normalize_rows(rows)

        assert [p.reference for p in pieces] == ["ok"]
        skipped = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(skipped) == 3

    @pytest.mark.parametrize("quantity", [0, "", "abc", None])
    def test_zero_or_unparsable_quantity_counts_as_one(self, quantity: object) -> None:
        pieces = normalize_rows([{"Ref": "Top", "L": 800, "W": 560, "Q": quantity}])

        assert [p.id for p in pieces] == ["Top-0"]

    def test_expand_quantity(self) -> None:
        pieces = expand_quantity("Door", 716, 396, 19, "NOIR", 3)

        assert [p.id for p in pieces] == ["Door-0", "Door-1", "Door-2"]
        assert all(p.finish == "NOIR" for p in pieces)


class TestReadRows:
    """Tests for file readers."""

    def test_csv_comma(self, tmp_path: Path) -> None:
        path = tmp_path / "pieces.csv"
        path.write_text("Ref,L,W,Q\nSide,720,560,2\n", encoding="utf-8")

        pieces = read_pieces(path)

        assert [p.id for p in pieces] == ["Side-0", "Side-1"]

    def test_csv_semicolon_with_decimal_commas(self, tmp_path: Path) -> None:
        path = tmp_path / "pieces.csv"
        path.write_text(
            "DENOMINATION;LONGUEUR;LARGEUR;EPAISSEUR;QUANTITE;FINITION\n"
            "Tablette;764,5;540;18,5;1;BLANC\n",
            encoding="utf-8",
        )

        pieces = read_pieces(path)

        assert pieces[0].length == 764.5
        assert pieces[0].thickness == 18.5

    def test_csv_with_bom(self, tmp_path: Path) -> None:
        path = tmp_path / "pieces.csv"
        path.write_bytes("\ufeffRef,L,W\nTop,800,560\n".encode("utf-8"))

        pieces = read_pieces(path)

        assert pieces[0].reference == "Top"

    def test_xlsx(self, tmp_path: Path) -> None:
        path = tmp_path / "pieces.xlsx"
        workbook = Workbook()
        sheet = workbook.active
        sheet.append(["DENOMINATION", "LONGUEUR", "LARGEUR", "EPAISSEUR", "QUANTITE", "FINITION"])
        sheet.append(["Side", 720, 560, 19, 2, "NOIR"])
        sheet.append([None, None, None, None, None, None])
        sheet.append(["Top", 800, 560, 19, 1, "NOIR"])
        workbook.save(path)

        pieces = read_pieces(path)

        assert [p.id for p in pieces] == ["Side-0", "Side-1", "Top-0"]

    def test_json_list_and_object(self, tmp_path: Path) -> None:
        rows = [{"Ref": "A", "L": 100, "W": 50}]
        as_list = tmp_path / "list.json"
        as_list.write_text(json.dumps(rows))
        as_object = tmp_path / "object.json"
        as_object.write_text(json.dumps({"pieces": rows}))

        assert read_rows(as_list) == rows
        assert read_rows(as_object) == rows

    def test_json_with_wrong_shape(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([1, 2, 3]))

        with pytest.raises(IngestionError):
            read_rows(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(IngestionError, match="not found"):
            read_rows(tmp_path / "missing.csv")

    def test_unsupported_suffix(self, tmp_path: Path) -> None:
        path = tmp_path / "pieces.txt"
        path.write_text("Ref,L,W\n")

        with pytest.raises(IngestionError, match="Unsupported"):
            read_rows(path)

    def test_corrupt_xlsx(self, tmp_path: Path) -> None:
        path = tmp_path / "pieces.xlsx"
        path.write_bytes(b"not a zip archive")

        with pytest.raises(IngestionError, match="Cannot read"):
            read_rows(path)

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "pieces.json"
        path.write_text("[{")

        with pytest.raises(IngestionError, match="Cannot read"):
            read_rows(path)


class TestWriteTemplate:
    """Tests for write_template."""

    def test_xlsx_template(self, tmp_path: Path) -> None:
        path = tmp_path / "template.xlsx"

        write_template(path)

        sheet = load_workbook(path).active
        rows = list(sheet.iter_rows(values_only=True))
        assert sheet.title == "Modele"
        assert rows == [TEMPLATE_HEADERS, TEMPLATE_ROW]

    def test_csv_template_round_trips_to_pieces(self, tmp_path: Path) -> None:
        path = tmp_path / "template.csv"

        write_template(path)
        pieces = read_pieces(path)

        assert len(pieces) == 5
        assert pieces[0].id == "Exemple-0"
        assert (pieces[0].length, pieces[0].width) == (800, 400)
        assert pieces[0].finish == "BLANC"
