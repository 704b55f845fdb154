"""The ``fetch`` command: download aggregates for every configured symbol."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import typer

from aggfetch.core.config import AggFetchSettings, build_run_config
from aggfetch.core.exceptions import ConfigError, InitError
from aggfetch.core.logging import configure_logging
from aggfetch.core.models import Granularity
from aggfetch.core.services import ProgressCounter, fetch_aggregates

from .constants import INIT_EXIT_CODE, VALIDATION_EXIT_CODE
from .formatters import ProgressDisplay, render_summary
from .utils import emit_error, get_cli_options

LOG_FILE_NAME = "aggfetch.log"


def register(app: typer.Typer) -> None:
    """Register the fetch command on the provided application."""

    app.command("fetch")(fetch_command)


def get_settings() -> AggFetchSettings:
    """Factory hook for obtaining runtime settings."""

    return AggFetchSettings()


def fetch_command(
    ctx: typer.Context,
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="YAML, TOML or JSON file with a 'tickers' list.",
    ),
    span: str = typer.Option(
        Granularity.MINUTE.value,
        "--span",
        "-s",
        help="Length of time for each candlestick.",
        show_default=True,
    ),
    output_dir: Path = typer.Option(
        ...,
        "--output-dir",
        "-o",
        help="Results are appended to OUTPUT_DIR/<ticker>/<span>.csv.",
    ),
    start: str = typer.Option(..., "--from", "-f", help="Start date (YYYY-MM-DD)."),
    end: str = typer.Option(..., "--to", "-t", help="End date (YYYY-MM-DD)."),
    limit: int | None = typer.Option(None, "--limit", min=1, help="Records requested per page."),
    concurrency: int | None = typer.Option(
        None, "--concurrency", min=1, help="Maximum number of tickers fetched at once."
    ),
    api_key: str | None = typer.Option(
        None,
        "--api-key",
        envvar="POLYGON_API_KEY",
        help="API key for the aggregates API.",
        show_envvar=True,
    ),
) -> None:
    """Fetch aggregates for every ticker in CONFIG and append them to disk."""

    options = get_cli_options(ctx)
    settings = get_settings()
    overrides: dict[str, object] = {}
    if limit is not None:
        overrides["page_limit"] = limit
    if concurrency is not None:
        overrides["concurrency_limit"] = concurrency
    if overrides:
        settings = settings.model_copy(update=overrides)

    try:
        run_config = build_run_config(
            config_path=config,
            granularity=span,
            output_root=output_dir,
            start=start,
            end=end,
            page_limit=settings.page_limit,
        )
    except ConfigError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from error

    configure_logging(
        options.log_level or settings.log_level,
        console_output=False,
        file_output=True,
        file_path=str(output_dir / LOG_FILE_NAME),
    )

    counter = ProgressCounter()
    try:
        with ProgressDisplay(counter, disable=options.no_progress):
            summary = asyncio.run(
                fetch_aggregates(run_config, api_key, settings=settings, progress=counter)
            )
    except InitError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=INIT_EXIT_CODE) from error

    render_summary(summary, stream=sys.stdout, format=options.format, no_color=options.no_color)


__all__ = ["fetch_command", "get_settings", "register"]
