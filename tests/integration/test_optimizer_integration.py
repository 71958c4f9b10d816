"""End-to-end optimization runs on the real clock.

These go from a piece list file through the engine to an exported
report, keeping every run short with a small stability window.
"""

from __future__ import annotations

import asyncio
import json
import random
import threading
from pathlib import Path

import pytest
from openpyxl import Workbook

from calpinage.application import (
    CallbackObserver,
    EngineState,
    OptimizationResult,
    OptimizerEngine,
    OptimizerOptions,
    StopReason,
    optimize,
)
from calpinage.domain.value_objects import PanelSize, Piece
from calpinage.infrastructure import read_pieces
from calpinage.infrastructure.exporters import CsvPlacementExporter, JsonReportExporter

SHORT = OptimizerOptions(max_duration=3.0, stability_threshold=0.2)


def _assert_valid_plan(result: OptimizationResult) -> None:
    for panel in result.panels:
        for p in panel.pieces:
            assert p.x >= 0 and p.y >= 0
            assert p.x + p.width <= panel.width + 1e-9
            assert p.y + p.height <= panel.height + 1e-9
        for i, a in enumerate(panel.pieces):
            for b in panel.pieces[i + 1 :]:
                overlap = (
                    a.x < b.x + b.width
                    and b.x < a.x + a.width
                    and a.y < b.y + b.height
                    and b.y < a.y + a.height
                )
                assert not overlap, f"{a.piece.id} overlaps {b.piece.id}"


@pytest.fixture
def workshop_xlsx(tmp_path: Path) -> Path:
    path = tmp_path / "cutlist.xlsx"
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["DENOMINATION", "LONGUEUR", "LARGEUR", "EPAISSEUR", "QUANTITE", "FINITION"])
    sheet.append(["Side", 720, 560, 19, 4, "BLANC"])
    sheet.append(["Shelf", "764,5", 540, 19, 6, "BLANC"])
    sheet.append(["Back", 764, 700, 8, 2, "BLANC"])
    sheet.append(["Door", 716, 396, 19, 4, "CHENE"])
    sheet.append([None, None, None, None, None, None])
    workbook.save(path)
    return path


class TestFileToReport:
    """Ingest a spreadsheet, optimize, export."""

    def test_xlsx_to_json_report(self, workshop_xlsx: Path, tmp_path: Path) -> None:
        pieces = read_pieces(workshop_xlsx)
        assert len(pieces) == 16

        result = OptimizerEngine(SHORT, rng=random.Random(3)).run(pieces)

        _assert_valid_plan(result)
        out = tmp_path / "plan.json"
        JsonReportExporter().export(result, out)
        report = json.loads(out.read_text(encoding="utf-8"))
        placed = {p["id"] for panel in report["panels"] for p in panel["pieces"]}
        assert placed == {p.id for p in pieces}
        assert {panel["material"]["label"] for panel in report["panels"]} == {
            "19|BLANC",
            "8|BLANC",
            "19|CHENE",
        }

    def test_csv_export_lists_every_piece(self, workshop_xlsx: Path) -> None:
        pieces = read_pieces(workshop_xlsx)

        result = OptimizerEngine(SHORT, rng=random.Random(5)).run(pieces)

        lines = CsvPlacementExporter().export_string(result).strip().splitlines()
        assert len(lines) == 1 + len(pieces)


class TestRealClockRuns:
    """Termination and stopping with the wall clock."""

    def test_stabilizes_before_time_budget(self) -> None:
        pieces = [
            Piece(id=f"P-{i}", reference="P", length=600, width=400) for i in range(10)
        ]

        result = OptimizerEngine(SHORT, rng=random.Random(1)).run(pieces)

        assert result.stop_reason is StopReason.STABILITY
        assert result.stats.total_panels == 1
        assert result.elapsed < SHORT.max_duration

    def test_small_panel_needs_several_panels(self) -> None:
        options = OptimizerOptions(
            panel=PanelSize(width=1000, height=800),
            max_duration=3.0,
            stability_threshold=0.2,
        )
        pieces = [
            Piece(id=f"P-{i}", reference="P", length=700, width=550) for i in range(5)
        ]

        result = OptimizerEngine(options, rng=random.Random(2)).run(pieces)

        _assert_valid_plan(result)
        assert result.stats.total_panels == 5
        assert [panel.number for panel in result.panels] == [1, 2, 3, 4, 5]

    def test_oversize_pieces_stay_unplaced(self) -> None:
        pieces = [
            Piece(id="Big-0", reference="Big", length=3000, width=2500),
            Piece(id="Ok-0", reference="Ok", length=500, width=500),
        ]

        result = OptimizerEngine(SHORT).run(pieces)

        assert [p.id for p in result.unplaced] == ["Big-0"]
        assert [p.piece.id for p in result.panels[0].pieces] == ["Ok-0"]

    def test_stop_from_another_thread(self) -> None:
        options = OptimizerOptions(max_duration=30.0, stability_threshold=30.0)
        engine = OptimizerEngine(options, rng=random.Random(4))
        pieces = [
            Piece(id=f"P-{i}", reference="P", length=300 + i, width=200) for i in range(20)
        ]
        timer = threading.Timer(0.3, engine.stop)
        timer.start()
        try:
            result = engine.run(pieces)
        finally:
            timer.cancel()

        assert result.stop_reason is StopReason.REQUESTED
        assert engine.state is EngineState.COMPLETED
        assert result.elapsed < 10
        _assert_valid_plan(result)

    def test_cancelled_task_marks_engine_requested(self) -> None:
        options = OptimizerOptions(max_duration=30.0, stability_threshold=30.0)
        engine = OptimizerEngine(options)
        pieces = [Piece(id=f"P-{i}", reference="P", length=400, width=300) for i in range(8)]
        completions: list[OptimizationResult] = []
        observer = CallbackObserver(on_complete=completions.append)

        async def scenario() -> None:
            task = engine.start(pieces, observer)
            await asyncio.sleep(0.1)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(scenario())

        assert engine.state is EngineState.COMPLETED
        assert engine.stop_reason is StopReason.REQUESTED
        assert len(completions) == 1
        assert completions[0].stop_reason is StopReason.REQUESTED
        assert completions[0].stats.total_panels == 1

    def test_module_level_optimize(self) -> None:
        pieces = [Piece(id="A-0", reference="A", length=1000, width=800)]

        result = asyncio.run(optimize(pieces, SHORT, rng=random.Random(0)))

        assert result.stats.total_panels == 1
        assert result.stop_reason is StopReason.STABILITY
