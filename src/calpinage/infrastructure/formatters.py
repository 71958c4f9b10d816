"""Plain-text formatters for terminal output."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from calpinage.domain.value_objects import Piece

if TYPE_CHECKING:
    from calpinage.application.optimizer import OptimizationResult

MM2_PER_M2 = 1_000_000


class PieceListFormatter:
    """Formats the ingested piece list, one line per reference and size."""

    def format(self, pieces: Sequence[Piece]) -> str:
        if not pieces:
            return "No pieces found."

        counts: dict[tuple[str, float, float, float, str], int] = {}
        for piece in pieces:
            key = (piece.reference, piece.length, piece.width, piece.thickness, piece.finish)
            counts[key] = counts.get(key, 0) + 1

        lines = [
            "PIECES",
            "=" * 72,
            f"{'Reference':<24} {'Length':>8} {'Width':>8} {'Thick':>6} {'Qty':>5}  {'Finish'}",
            "-" * 72,
        ]
        for (reference, length, width, thickness, finish), count in counts.items():
            lines.append(
                f"{reference:<24} {length:>8g} {width:>8g} {thickness:>6g} {count:>5}  {finish}"
            )
        lines.append("-" * 72)
        lines.append(f"{'TOTAL':<24} {'':>8} {'':>8} {'':>6} {len(pieces):>5}")
        return "\n".join(lines)


class ResultSummaryFormatter:
    """Formats an optimization result as a summary and per-panel table."""

    def format(self, result: OptimizationResult) -> str:
        stats = result.stats
        lines = [
            "OPTIMIZATION RESULT",
            "=" * 72,
            f"Panels:       {stats.total_panels}",
            f"Utilization:  {stats.global_utilization:.1f}%",
            f"Cuts (est.):  {stats.total_cuts}",
            f"Iterations:   {result.iterations} ({result.stop_reason.value}, "
            f"{result.elapsed:.1f}s)",
        ]

        if result.panels:
            lines.extend(
                [
                    "",
                    f"{'#':>3}  {'Material':<20} {'Pieces':>6} {'Util %':>7} "
                    f"{'Waste m2':>9} {'Offcuts':>7}",
                    "-" * 72,
                ]
            )
            for panel in result.panels:
                material = panel.material
                label = f"{material.thickness:g}mm {material.finish}" if material else "-"
                lines.append(
                    f"{panel.number:>3}  {label:<20} {len(panel.pieces):>6} "
                    f"{panel.utilization:>7.1f} {panel.waste / MM2_PER_M2:>9.2f} "
                    f"{len(panel.offcuts):>7}"
                )

        if result.unplaced:
            lines.append("")
            lines.append(f"UNPLACED ({len(result.unplaced)} pieces larger than the panel):")
            for piece in result.unplaced:
                lines.append(f"  - {piece.id}: {piece.length:g}x{piece.width:g}")

        return "\n".join(lines)
