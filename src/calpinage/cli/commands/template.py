"""Template command for writing an example piece list."""

from pathlib import Path
from typing import Annotated

import typer

from calpinage.infrastructure import write_template


def template_command(
    output: Annotated[
        Path,
        typer.Argument(help="Destination file (.xlsx or .csv)"),
    ] = Path("calpinage_template.xlsx"),
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite existing file"),
    ] = False,
) -> None:
    """Write a piece list template with one example row.

    Example:
        calpinage template pieces.xlsx
    """
    if output.exists() and not force:
        typer.echo(f"Error: {output} already exists. Use --force to overwrite.", err=True)
        raise typer.Exit(code=1)

    try:
        write_template(output)
    except OSError as e:
        typer.echo(f"Error writing template: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Template written to {output}")
