"""Pytest configuration and shared fixtures for calpinage tests."""

from __future__ import annotations

from typing import Callable

import pytest

from calpinage.application import (
    OptimizationResult,
    OptimizationStats,
    OptimizerOptions,
    StopReason,
    mean_utilization,
)
from calpinage.domain.value_objects import MaterialTag, Piece
from calpinage.infrastructure.bin_packing import GuillotinePacker, PackingConfig


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: tests that take a long time to run")


class FakeClock:
    """Monotonic clock that advances a fixed step on every reading."""

    def __init__(self, step: float = 0.01, start: float = 1000.0) -> None:
        self.step = step
        self.now = start
        self.calls = 0

    def __call__(self) -> float:
        self.calls += 1
        self.now += self.step
        return self.now


# =============================================================================
# Shared fixtures
# =============================================================================


@pytest.fixture
def fake_clock() -> FakeClock:
    """A clock that advances 10 ms per reading."""
    return FakeClock()


@pytest.fixture
def make_pieces() -> Callable[..., list[Piece]]:
    """Factory for ``count`` identical pieces with ids ``{ref}-{i}``."""

    def _make(
        length: float,
        width: float,
        count: int = 1,
        reference: str = "P",
        thickness: float = 19.0,
        finish: str = "Std",
    ) -> list[Piece]:
        return [
            Piece(
                id=f"{reference}-{i}",
                reference=reference,
                length=length,
                width=width,
                thickness=thickness,
                finish=finish,
            )
            for i in range(count)
        ]

    return _make


@pytest.fixture
def mixed_pieces() -> list[Piece]:
    """A small workshop cut list across two finishes."""
    pieces: list[Piece] = []
    rows = [
        ("Side", 720, 560, 2, "BLANC"),
        ("Shelf", 764, 540, 3, "BLANC"),
        ("Top", 800, 560, 1, "BLANC"),
        ("Door", 716, 396, 2, "NOIR"),
        ("Drawer", 396, 180, 4, "NOIR"),
    ]
    for reference, length, width, quantity, finish in rows:
        for i in range(quantity):
            pieces.append(
                Piece(
                    id=f"{reference}-{i}",
                    reference=reference,
                    length=length,
                    width=width,
                    finish=finish,
                )
            )
    return pieces


@pytest.fixture
def quick_options() -> OptimizerOptions:
    """Options for short, fake-clock driven runs."""
    return OptimizerOptions(max_duration=5.0, stability_threshold=0.5, yield_interval=0.0)


@pytest.fixture
def sample_result() -> OptimizationResult:
    """A fixed two-panel result with one unplaced piece."""
    pieces = [
        Piece(id="Side-0", reference="Side", length=2000, width=2000, finish="BLANC"),
        Piece(id="Side-1", reference="Side", length=2000, width=2000, finish="BLANC"),
        Piece(id="Shelf-0", reference="Shelf", length=700, width=500, finish="BLANC"),
    ]
    packer = GuillotinePacker(PackingConfig(allow_rotation=False))
    tag = MaterialTag(thickness=19.0, finish="BLANC", label="19|BLANC")
    panels = []
    for number, panel in enumerate(packer.pack(pieces).panels, start=1):
        copy = panel.clone(number=number)
        copy.material = tag
        panels.append(copy)
    stats = OptimizationStats(
        total_panels=len(panels),
        global_utilization=mean_utilization(panels),
        total_cuts=sum(p.cut_count for p in panels),
        timestamp="2026-01-15T10:00:00+00:00",
    )
    return OptimizationResult(
        panels=tuple(panels),
        stats=stats,
        unplaced=(Piece(id="Huge-0", reference="Huge", length=5000, width=5000),),
        stop_reason=StopReason.STABILITY,
        iterations=42,
        elapsed=1.5,
    )
