"""CLI for watchdrift."""

import logging
import pathlib

import typer

from watchdrift.core import config, exceptions
from watchdrift.processing import formatting

logger = config.get_logger()
app = typer.Typer(
    help="Compute the accuracy of watches from an export file.",
)


def version_check(version: bool) -> None:
    """Print the current version of watchdrift and exit."""
    if version:
        typer.echo(f"Watchdrift version: {config.get_version()}")
        raise typer.Exit()


@app.command()
def main(
    input: pathlib.Path = typer.Argument(
        ..., help="Path to the .json export file.", exists=True
    ),
    output: pathlib.Path = typer.Option(
        None,
        "-o",
        "--output",
        help="Path where the accuracy table will be saved. "
        "Supports .csv and .parquet formats.",
    ),
    watch_id: str = typer.Option(
        None,
        "-w",
        "--watch-id",
        help="Only process the watch with this id.",
    ),
    verbosity: bool = typer.Option(
        False,
        "-v",
        "--verbosity",
        help="Determines the level of verbosity. Use -v for DEBUG. "
        "Defaults to INFO if not included.",
    ),
    version: bool = typer.Option(
        False,
        "-V",
        "--version",
        help="Print the current version of watchdrift and exit.",
        is_eager=True,
        callback=version_check,
    ),
) -> None:
    """Run watchdrift orchestrator with command line arguments."""
    from watchdrift.core import orchestrator

    log_level = logging.INFO
    if verbosity:
        log_level = logging.DEBUG
    logger.setLevel(log_level)

    logger.debug("Running watchdrift. arguments given: %s", locals())
    try:
        reports = orchestrator.run(
            input=input,
            output=output,
            watch_id=watch_id,
            verbosity=log_level,
        )
    except exceptions.LoggedException as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    for report in reports.values():
        stats = report.stats
        typer.echo(
            f"{report.watch.name}: "
            f"{formatting.format_accuracy(stats.seconds_per_day)} "
            f"({stats.trend}, {stats.confidence} confidence, "
            f"{formatting.classify_magnitude(stats.seconds_per_day)}) "
            f"over {stats.elapsed_days:.1f} days, "
            f"{stats.measurement_count} measurements"
        )


if __name__ == "__main__":
    app()
