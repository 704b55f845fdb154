"""Rendering of run summaries and the live progress bar."""

from __future__ import annotations

import json
from typing import TextIO

from rich.box import SIMPLE
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from aggfetch.core.services import ProgressCounter, RunSummary

SUMMARY_COLUMNS = ["symbol", "status", "pages", "records", "path", "error"]
SUPPORTED_FORMATS = ("table", "jsonl")


def validate_format(name: str) -> str:
    normalized = name.strip().lower()
    if normalized not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported format '{name}'. Available formats: table, jsonl.")
    return normalized


def summary_rows(summary: RunSummary) -> list[dict[str, object]]:
    return [
        {
            "symbol": outcome.symbol,
            "status": outcome.status.value,
            "pages": outcome.pages,
            "records": outcome.records,
            "path": str(outcome.path) if outcome.path else None,
            "error": outcome.error,
        }
        for outcome in summary.outcomes
    ]


def render_summary(summary: RunSummary, *, stream: TextIO, format: str = "table", no_color: bool = False) -> None:
    """Write one row per symbol in the requested format."""

    rows = summary_rows(summary)
    if validate_format(format) == "jsonl":
        for row in rows:
            json.dump(row, stream, ensure_ascii=False, default=str)
            stream.write("\n")
        stream.flush()
        return

    console = Console(file=stream, color_system=None if no_color else "auto", no_color=no_color)
    table = Table(box=SIMPLE, show_lines=False)
    for column in SUMMARY_COLUMNS:
        table.add_column(column, header_style="" if no_color else "bold")
    for row in rows:
        table.add_row(*("-" if row[column] is None else str(row[column]) for column in SUMMARY_COLUMNS))
    console.print(table)
    console.print(
        f"{len(summary.completed)} completed, {len(summary.failed)} failed, "
        f"{len(summary.skipped)} skipped; {summary.records} records in {summary.pages} pages "
        f"({summary.total_time_seconds:.1f}s)"
    )


class ProgressDisplay:
    """Mirrors a :class:`ProgressCounter` onto a rich progress bar."""

    def __init__(self, counter: ProgressCounter, *, console: Console | None = None, disable: bool = False) -> None:
        self.counter = counter
        self._progress = Progress(
            TimeElapsedColumn(),
            BarColumn(bar_width=40, style="blue", complete_style="cyan"),
            MofNCompleteColumn(),
            TaskProgressColumn(),
            TextColumn("{task.description}"),
            console=console,
            disable=disable,
        )
        self._task: TaskID | None = None

    def __enter__(self) -> "ProgressDisplay":
        self._progress.start()
        self._task = self._progress.add_task("pages", total=self.counter.total or None)
        self.counter.subscribe(self._update)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._progress.stop()

    def _update(self, completed: int, total: int) -> None:
        if self._task is not None:
            self._progress.update(self._task, completed=completed, total=total or None)


__all__ = ["ProgressDisplay", "SUMMARY_COLUMNS", "render_summary", "summary_rows", "validate_format"]
