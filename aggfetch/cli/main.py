"""Main entry point for the aggfetch command line interface."""

from __future__ import annotations

import typer

from .fetch import register as register_fetch_command
from .formatters import validate_format


def create_app() -> typer.Typer:
    """Create a Typer application instance for aggfetch."""

    app = typer.Typer(add_completion=False, help="Download price aggregates to CSV files")

    @app.callback()
    def main(
        ctx: typer.Context,
        format: str = typer.Option(
            "table",
            "--format",
            help="Summary output format (table or jsonl).",
            show_default=True,
        ),
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            help="Log level; defaults to AGGFETCH_LOG_LEVEL or INFO.",
        ),
        no_color: bool = typer.Option(
            False,
            "--no-color",
            help="Disable colorized output.",
        ),
        no_progress: bool = typer.Option(
            False,
            "--no-progress",
            help="Do not render the progress bar.",
        ),
    ) -> None:
        ctx.ensure_object(dict)
        try:
            normalized_format = validate_format(format)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--format") from exc

        ctx.obj.update(
            {
                "format": normalized_format,
                "log_level": log_level.upper() if log_level else None,
                "no_color": no_color,
                "no_progress": no_progress,
            }
        )

    register_fetch_command(app)
    return app


app = create_app()
