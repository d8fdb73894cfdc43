"""Streaming readers for Xenium transcript tables.

This module opens ``transcripts.csv``, ``transcripts.csv.gz``, or
``transcripts.parquet`` and yields one immutable row at a time. Only the
current row (or one Parquet record batch) is held in memory.
"""

from __future__ import annotations

import csv
import gzip
from pathlib import Path
from typing import IO, Any, Iterator, Mapping, Sequence

from core.constants import (
    CELL_ID_COLUMN,
    DEFAULT_PARQUET_BATCH_SIZE,
    FALSE_FLAG_VALUES,
    FEATURE_NAME_COLUMN,
    GZIP_SUFFIX,
    NUCLEUS_COLUMN,
    PARQUET_SUFFIX,
    QV_COLUMN,
    REQUIRED_COLUMNS,
    TRUE_FLAG_VALUES,
    X_COLUMN,
    Y_COLUMN,
    Z_COLUMN,
)
from core.errors import DependencyError, InputIoError, SchemaError
from core.types import TranscriptRow


class TranscriptReader:
    """Single-pass reader over a transcript table.

    Use as a context manager so the underlying file is closed on every
    exit path. Iterating yields ``TranscriptRow`` values in file order.
    """

    def __init__(
        self,
        source_path: str,
        parquet_batch_size: int = DEFAULT_PARQUET_BATCH_SIZE,
    ) -> None:
        self._source_path = Path(source_path).expanduser()
        self._parquet_batch_size = parquet_batch_size
        self._handle: IO[str] | None = None
        self._csv_reader: Any = None
        self._parquet_file: Any = None
        self._columns: tuple[str, ...] = ()

    def __enter__(self) -> "TranscriptReader":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def columns(self) -> tuple[str, ...]:
        """Source column names in file order."""
        return self._columns

    @property
    def source_path(self) -> Path:
        """Source path with ``~`` expanded."""
        return self._source_path

    def open(self) -> None:
        """Open the source and validate its header.

        Raises:
            InputIoError: If the source is missing or unreadable.
            SchemaError: If the header lacks a required column.
            DependencyError: If a Parquet source is given without pyarrow.
        """
        if not self._source_path.is_file():
            raise InputIoError(
                f"Failed to read transcripts at {self._source_path}: file does not exist. "
                "Provide the path to transcripts.csv from a Xenium output bundle."
            )
        if _is_parquet(self._source_path):
            self._open_parquet()
        else:
            self._open_csv()
        try:
            validate_columns(self._columns, self._source_path)
        except SchemaError:
            self.close()
            raise

    def close(self) -> None:
        """Close the underlying file, if open."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        if self._parquet_file is not None:
            self._parquet_file.close()
            self._parquet_file = None

    def __iter__(self) -> Iterator[TranscriptRow]:
        if self._parquet_file is not None:
            return self._iter_parquet_rows()
        if self._csv_reader is not None:
            return self._iter_csv_rows()
        raise InputIoError(
            f"Transcript source {self._source_path} is not open. "
            "Use the reader as a context manager before iterating."
        )

    def _open_csv(self) -> None:
        try:
            self._handle = _open_text(self._source_path)
            self._csv_reader = csv.reader(self._handle)
            header = next(self._csv_reader, None)
        except (OSError, EOFError, UnicodeDecodeError, csv.Error) as error:
            self.close()
            raise InputIoError(
                f"Failed to read transcripts at {self._source_path}: {error}. "
                "Check that the file is a readable CSV."
            ) from error
        if header is None:
            self.close()
            raise SchemaError(
                f"Transcript file {self._source_path} is empty: expected a header row."
            )
        self._columns = tuple(column.strip() for column in header)

    def _open_parquet(self) -> None:
        try:
            import pyarrow.parquet as pq
        except ImportError as error:
            raise DependencyError(
                "Parquet input requires pyarrow, but it is not installed. "
                "Install the 'parquet' extra or convert the input to CSV."
            ) from error
        try:
            self._parquet_file = pq.ParquetFile(str(self._source_path))
        except (OSError, ValueError) as error:
            raise InputIoError(
                f"Failed to read transcripts at {self._source_path}: {error}. "
                "Check that the file is a valid Parquet table."
            ) from error
        self._columns = tuple(self._parquet_file.schema_arrow.names)

    def _iter_csv_rows(self) -> Iterator[TranscriptRow]:
        for values in self._read_csv_values():
            if not values:
                continue
            line_number = self._csv_reader.line_num
            if len(values) != len(self._columns):
                raise SchemaError(
                    f"Malformed row at {self._source_path}:{line_number}: "
                    f"expected {len(self._columns)} fields, got {len(values)}."
                )
            yield parse_transcript_row(dict(zip(self._columns, values)), line_number)

    def _read_csv_values(self) -> Iterator[list[str]]:
        rows = iter(self._csv_reader)
        while True:
            try:
                values = next(rows)
            except StopIteration:
                return
            except csv.Error as error:
                raise SchemaError(
                    f"Malformed CSV at {self._source_path}:{self._csv_reader.line_num}: "
                    f"{error}."
                ) from error
            except (OSError, EOFError, UnicodeDecodeError) as error:
                raise InputIoError(
                    f"Failed to read transcripts at {self._source_path}: {error}."
                ) from error
            yield values

    def _iter_parquet_rows(self) -> Iterator[TranscriptRow]:
        row_number = 0
        for records in self._read_parquet_batches():
            for values in records:
                row_number += 1
                yield parse_transcript_row(values, row_number)

    def _read_parquet_batches(self) -> Iterator[list[dict[str, Any]]]:
        batches = self._parquet_file.iter_batches(batch_size=self._parquet_batch_size)
        while True:
            try:
                batch = next(batches)
                records = batch.to_pylist()
            except StopIteration:
                return
            except (OSError, ValueError) as error:
                raise InputIoError(
                    f"Failed to read transcripts at {self._source_path}: {error}. "
                    "Check that the file is a valid Parquet table."
                ) from error
            yield records


def validate_columns(columns: Sequence[str], source_path: Path | str) -> None:
    """Check that every required column is present.

    Args:
        columns: Header column names.
        source_path: Source path for error context.

    Raises:
        SchemaError: If a required column is missing.
    """
    missing = [column for column in REQUIRED_COLUMNS if column not in columns]
    if missing:
        raise SchemaError(
            f"Transcript file {source_path} is missing required columns: "
            f"{', '.join(missing)}. Expected a Xenium transcripts table."
        )


def parse_transcript_row(values: Mapping[str, object], line_number: int) -> TranscriptRow:
    """Build a typed row from raw column values.

    Args:
        values: Column names mapped to raw values.
        line_number: One-based source row number for error context.

    Returns:
        Parsed immutable row.

    Raises:
        SchemaError: If a numeric or boolean field cannot be parsed.
    """
    fields = {column: _as_text(value) for column, value in values.items()}
    return TranscriptRow(
        cell_id_raw=fields[CELL_ID_COLUMN],
        x=_parse_float(fields, X_COLUMN, line_number),
        y=_parse_float(fields, Y_COLUMN, line_number),
        z=_parse_float(fields, Z_COLUMN, line_number),
        feature_name=fields[FEATURE_NAME_COLUMN],
        qv=_parse_float(fields, QV_COLUMN, line_number),
        overlaps_nucleus=_parse_flag(fields, NUCLEUS_COLUMN, line_number),
        fields=fields,
        line_number=line_number,
    )


def _open_text(source_path: Path) -> IO[str]:
    if source_path.suffix.lower() == GZIP_SUFFIX:
        return gzip.open(source_path, "rt", encoding="utf-8-sig", newline="")
    return source_path.open("r", encoding="utf-8-sig", newline="")


def _is_parquet(source_path: Path) -> bool:
    return source_path.suffix.lower() == PARQUET_SUFFIX


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def _parse_float(fields: Mapping[str, str], column: str, line_number: int) -> float:
    raw_value = fields[column]
    try:
        return float(raw_value)
    except ValueError as error:
        raise SchemaError(
            f"Invalid value in column '{column}' at row {line_number}: "
            f"expected a number, got '{raw_value}'."
        ) from error


def _parse_flag(fields: Mapping[str, str], column: str, line_number: int) -> bool:
    raw_value = fields[column]
    normalized = raw_value.strip().lower()
    if normalized in TRUE_FLAG_VALUES:
        return True
    if normalized in FALSE_FLAG_VALUES:
        return False
    raise SchemaError(
        f"Invalid value in column '{column}' at row {line_number}: "
        f"expected 0/1 or true/false, got '{raw_value}'."
    )
