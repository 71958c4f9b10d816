"""Validate command for checking piece list files.

Reads a piece list, prints the normalized preview and flags pieces that
can never fit the stock panel, without running the optimizer.
"""

from pathlib import Path
from typing import Annotated

import typer

from calpinage.domain.exceptions import IngestionError
from calpinage.domain.value_objects import DEFAULT_PANEL_HEIGHT, DEFAULT_PANEL_WIDTH
from calpinage.infrastructure import PieceListFormatter, read_pieces


def validate_command(
    input_file: Annotated[
        Path,
        typer.Argument(help="Piece list to check (.csv, .xlsx or .json)"),
    ],
    width: Annotated[
        float,
        typer.Option("--width", help="Panel width in mm"),
    ] = DEFAULT_PANEL_WIDTH,
    height: Annotated[
        float,
        typer.Option("--height", help="Panel height in mm"),
    ] = DEFAULT_PANEL_HEIGHT,
    rotation: Annotated[
        bool,
        typer.Option("--rotation/--no-rotation", help="Allow 90 degree rotation"),
    ] = True,
) -> None:
    """Validate a piece list file.

    Exit codes:
        0 - All pieces fit the panel
        1 - The file cannot be read or holds no valid pieces
        2 - Some pieces are larger than the panel

    Example:
        calpinage validate pieces.xlsx
    """
    try:
        pieces = read_pieces(input_file)
    except IngestionError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if not pieces:
        typer.echo(f"Error: no valid pieces found in {input_file}", err=True)
        raise typer.Exit(code=1)

    typer.echo(PieceListFormatter().format(pieces))
    typer.echo()

    oversized = [p for p in pieces if not p.fits_in(width, height, rotation)]
    if oversized:
        typer.echo(f"Warnings: {len(oversized)} pieces do not fit a {width:g}x{height:g} panel")
        for piece in oversized:
            typer.echo(f"  - {piece.id}: {piece.length:g}x{piece.width:g}")
        raise typer.Exit(code=2)

    typer.echo(f"OK: {len(pieces)} pieces ready to optimize.")
