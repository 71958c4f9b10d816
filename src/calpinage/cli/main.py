"""Typer CLI for panel cutting optimization."""

import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Annotated, Sequence

import typer
from pydantic import ValidationError as PydanticValidationError

from calpinage.application import (
    OptimizationResult,
    OptimizerEngine,
    ProgressEvent,
    ProgressObserver,
)
from calpinage.application.config import (
    CalpinageConfiguration,
    ConfigError,
    config_to_options,
    config_to_rng,
    load_config,
    merge_config_with_cli,
)
from calpinage.cli.commands import template_command, validate_command
from calpinage.domain.exceptions import IngestionError
from calpinage.domain.value_objects import Piece
from calpinage.infrastructure import ResultSummaryFormatter, read_pieces
from calpinage.infrastructure.exporters import ExporterRegistry

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


app = typer.Typer(
    name="calpinage",
    help="Optimize the cutting of rectangular pieces from stock panels.",
)

app.command(name="validate")(validate_command)
app.command(name="template")(template_command)


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Log progress (-vv for debug)"),
    ] = 0,
) -> None:
    """Optimize the cutting of rectangular pieces from stock panels."""
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


class ProgressBarObserver:
    """Drives a click progress bar from optimizer progress events."""

    def __init__(self, bar) -> None:
        self._bar = bar
        self._shown = 0

    def on_progress(self, event: ProgressEvent) -> None:
        target = int(event.percent)
        if target > self._shown:
            self._bar.update(target - self._shown)
            self._shown = target

    def on_complete(self, result: OptimizationResult) -> None:
        if self._shown < 100:
            self._bar.update(100 - self._shown)
            self._shown = 100


async def _optimize_until_interrupted(
    engine: OptimizerEngine,
    pieces: Sequence[Piece],
    observer: ProgressObserver,
) -> OptimizationResult:
    """Run the engine with Ctrl+C mapped to a graceful stop."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, engine.stop)
        installed = True
    except (NotImplementedError, RuntimeError):
        # Windows loops and non-main threads have no signal handlers.
        logger.debug("SIGINT handler unavailable, Ctrl+C will abort the run")
        installed = False
    try:
        return await engine.optimize(pieces, observer)
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


@app.command()
def optimize(
    input_file: Annotated[
        Path,
        typer.Argument(help="Piece list (.csv, .xlsx or .json)"),
    ],
    config_file: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to JSON configuration file"),
    ] = None,
    width: Annotated[
        float | None,
        typer.Option("--width", help="Panel width in mm"),
    ] = None,
    height: Annotated[
        float | None,
        typer.Option("--height", help="Panel height in mm"),
    ] = None,
    rotation: Annotated[
        bool | None,
        typer.Option("--rotation/--no-rotation", help="Allow 90 degree rotation"),
    ] = None,
    max_time: Annotated[
        float | None,
        typer.Option("--max-time", help="Time budget in seconds"),
    ] = None,
    stability: Annotated[
        float | None,
        typer.Option("--stability", help="Stop after this many seconds without improvement"),
    ] = None,
    seed: Annotated[
        int | None,
        typer.Option("--seed", help="Random seed for reproducible runs"),
    ] = None,
    output_format: Annotated[
        str | None,
        typer.Option("--format", "-f", help="Output format: text, json, csv"),
    ] = None,
    output_file: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the report to this file"),
    ] = None,
) -> None:
    """Compute a cutting plan for a piece list.

    Runs until the layout stops improving, the time budget runs out or
    Ctrl+C is pressed, then prints or writes the best plan found.

    Example:
        calpinage optimize pieces.xlsx --max-time 20 --format json -o plan.json
    """
    if config_file is not None:
        try:
            config = load_config(config_file)
        except ConfigError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1)
    else:
        config = CalpinageConfiguration(schema_version="1.0")

    try:
        config = merge_config_with_cli(
            config,
            width=width,
            height=height,
            allow_rotation=rotation,
            max_duration=max_time,
            stability_threshold=stability,
            seed=seed,
            output_format=output_format,
            output_file=output_file,
        )
    except PydanticValidationError as e:
        typer.echo("Error: invalid options", err=True)
        for err in e.errors():
            location = ".".join(str(part) for part in err["loc"])
            typer.echo(f"  - {location}: {err['msg']}", err=True)
        raise typer.Exit(code=1)

    try:
        pieces = read_pieces(input_file)
    except IngestionError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if not pieces:
        typer.echo(f"Error: no valid pieces found in {input_file}", err=True)
        raise typer.Exit(code=1)

    engine = OptimizerEngine(config_to_options(config), rng=config_to_rng(config))
    with typer.progressbar(length=100, label="Optimizing", file=sys.stderr) as bar:
        result = asyncio.run(
            _optimize_until_interrupted(engine, pieces, ProgressBarObserver(bar))
        )

    if result.unplaced:
        typer.echo(
            f"Warning: {len(result.unplaced)} pieces are larger than the panel and were not placed",
            err=True,
        )

    _write_output(result, config.output.format, config.output.file)


def _write_output(result: OptimizationResult, output_format: str, output_file: str | None) -> None:
    if output_format == "text":
        report = ResultSummaryFormatter().format(result)
        if output_file is None:
            typer.echo(report)
        else:
            Path(output_file).write_text(report + "\n", encoding="utf-8")
            typer.echo(f"Report written to {output_file}")
        return

    exporter = ExporterRegistry.get(output_format)()
    if output_file is None:
        typer.echo(exporter.export_string(result))
    else:
        exporter.export(result, Path(output_file))
        typer.echo(f"{output_format.upper()} export written to {output_file}")


if __name__ == "__main__":
    app()
