"""Append-only CSV persistence for aggregate records."""

from __future__ import annotations

import asyncio
import csv
import os
from collections.abc import Iterable, Sequence
from decimal import Decimal
from pathlib import Path
from typing import IO

from aggfetch.core.exceptions import FileError
from aggfetch.core.models import AggregateRecord, Granularity


def aggregate_path(output_root: str | Path, symbol: str, granularity: Granularity) -> Path:
    """Return ``output_root/symbol/granularity.csv``."""
    return Path(output_root) / symbol / f"{granularity.value}.csv"


def _decimal_text(value: Decimal) -> str:
    # fixed-point, never exponent form
    return format(value, "f")


def record_to_row(record: AggregateRecord) -> list[str]:
    """Serialize ``record`` into a CSV row.

    The six OHLCV columns are always present; transactions, otc and vwap
    are appended in that order only when set, so rows can differ in length.
    """
    row = [
        str(record.timestamp),
        _decimal_text(record.open),
        _decimal_text(record.high),
        _decimal_text(record.low),
        _decimal_text(record.close),
        _decimal_text(record.volume),
    ]
    if record.transactions is not None:
        row.append(str(record.transactions))
    if record.otc is not None:
        row.append("true" if record.otc else "false")
    if record.vwap is not None:
        row.append(_decimal_text(record.vwap))
    return row


class AggregateFileWriter:
    """Appends record batches to one symbol's CSV file.

    The file is opened in append mode and never truncated; every call to
    :meth:`append` is flushed and fsynced before it returns. Blocking file
    operations run in a worker thread.
    """

    def __init__(self, output_root: str | Path, symbol: str, granularity: Granularity) -> None:
        self.path = aggregate_path(output_root, symbol, granularity)
        self.symbol = symbol
        self._file: IO[str] | None = None
        self._writer = None

    async def __aenter__(self) -> "AggregateFileWriter":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def is_open(self) -> bool:
        return self._file is not None

    async def open(self) -> None:
        """Create missing parent directories and open the file for appending."""
        if self._file is not None:
            return
        try:
            await asyncio.to_thread(self.path.parent.mkdir, parents=True, exist_ok=True)
        except (OSError, ValueError) as exc:
            raise FileError(
                f"Error creating directory: {exc}", operation="create_dir", path=self.path.parent
            ) from exc
        try:
            self._file = await asyncio.to_thread(open, self.path, "a", newline="", encoding="utf-8")
        except (OSError, ValueError) as exc:
            raise FileError(f"Error creating file: {exc}", operation="open", path=self.path) from exc
        self._writer = csv.writer(self._file, lineterminator="\n")

    async def append(self, records: Sequence[AggregateRecord]) -> int:
        """Write ``records`` and flush them to stable storage.

        Returns:
            int: number of rows written
        """
        if self._file is None:
            await self.open()
        rows = [record_to_row(record) for record in records]
        if not rows:
            return 0
        await asyncio.to_thread(self._write_rows, rows)
        return len(rows)

    def _write_rows(self, rows: Iterable[list[str]]) -> None:
        try:
            self._writer.writerows(rows)
        except (OSError, csv.Error) as exc:
            raise FileError(f"Error writing CSV: {exc}", operation="write", path=self.path) from exc
        try:
            self._file.flush()
            os.fsync(self._file.fileno())
        except OSError as exc:
            raise FileError(f"Error writing file: {exc}", operation="flush", path=self.path) from exc

    async def close(self) -> None:
        if self._file is None:
            return
        file, self._file, self._writer = self._file, None, None
        try:
            await asyncio.to_thread(file.close)
        except OSError as exc:
            raise FileError(f"Error closing file: {exc}", operation="close", path=self.path) from exc


async def append_records(
    output_root: str | Path,
    symbol: str,
    granularity: Granularity,
    records: Sequence[AggregateRecord],
) -> Path:
    """Append one batch to ``output_root/symbol/granularity.csv`` and return the path."""
    async with AggregateFileWriter(output_root, symbol, granularity) as writer:
        await writer.append(records)
    return writer.path


__all__ = ["AggregateFileWriter", "aggregate_path", "append_records", "record_to_row"]
