"""Filtered transcript CSV output.

This module derives the self-describing output file name from the
filter parameters and streams kept rows to disk as CSV.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import IO, Any, Sequence

from core.constants import CELL_ID_COLUMN, OUTPUT_FILE_TEMPLATE
from core.errors import OutputIoError
from core.types import FilterConfig, TranscriptRow


def build_output_file_name(config: FilterConfig) -> str:
    """Build the output file name encoding the filter parameters.

    Args:
        config: Filter parameters.

    Returns:
        File name such as
        ``X0-24000_Y0-24000_filtered_transcripts_nucleus_only_false.csv``.
    """
    return OUTPUT_FILE_TEMPLATE.format(
        min_x=format_filter_value(config.min_x),
        max_x=format_filter_value(config.max_x),
        min_y=format_filter_value(config.min_y),
        max_y=format_filter_value(config.max_y),
        nucleus_only=str(config.nucleus_only).lower(),
    )


def build_output_path(config: FilterConfig) -> Path:
    """Return the output file path inside ``config.out_dir``."""
    return Path(config.out_dir).expanduser() / build_output_file_name(config)


def format_filter_value(value: float) -> str:
    """Render a bound without a trailing ``.0`` for integral values."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class TranscriptCsvWriter:
    """CSV sink for filtered transcripts.

    Rows are written with the source columns in source order and the
    ``cell_id`` column replaced by the decoded integer id.
    """

    def __init__(self, output_path: Path, columns: Sequence[str]) -> None:
        self._output_path = output_path
        self._columns = tuple(columns)
        self._handle: IO[str] | None = None
        self._csv_writer: Any = None

    def __enter__(self) -> "TranscriptCsvWriter":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def output_path(self) -> Path:
        """Destination CSV path."""
        return self._output_path

    def open(self) -> None:
        """Create the output directory and file, then write the header.

        Raises:
            OutputIoError: If the directory or file cannot be created.
        """
        try:
            self._output_path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self._output_path.open("w", encoding="utf-8", newline="")
            self._csv_writer = csv.writer(self._handle)
            self._csv_writer.writerow(self._columns)
        except OSError as error:
            self.close()
            raise OutputIoError(
                f"Failed to create output file {self._output_path}: {error}. "
                "Check that --out-dir is writable."
            ) from error

    def write(self, row: TranscriptRow) -> None:
        """Write one kept row.

        Args:
            row: Row with a decoded ``cell_id``.

        Raises:
            ValueError: If the row was not decoded.
            OutputIoError: If the write fails.
        """
        if row.cell_id is None:
            raise ValueError(
                f"Row {row.line_number} has no decoded cell id and cannot be written."
            )
        if self._csv_writer is None:
            raise OutputIoError(
                f"Output file {self._output_path} is not open. "
                "Use the writer as a context manager before writing."
            )
        values = [
            str(row.cell_id) if column == CELL_ID_COLUMN else row.fields.get(column, "")
            for column in self._columns
        ]
        try:
            self._csv_writer.writerow(values)
        except OSError as error:
            raise OutputIoError(
                f"Failed to write output file {self._output_path}: {error}."
            ) from error

    def close(self) -> None:
        """Flush and close the output file, if open.

        Raises:
            OutputIoError: If flushing buffered rows fails.
        """
        handle = self._handle
        self._handle = None
        self._csv_writer = None
        if handle is None:
            return
        try:
            handle.close()
        except OSError as error:
            raise OutputIoError(
                f"Failed to flush output file {self._output_path}: {error}."
            ) from error
