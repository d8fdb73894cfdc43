"""Unit tests for transcript table readers."""

from __future__ import annotations

import gzip
from pathlib import Path

import pytest

from core.errors import InputIoError, SchemaError
from ingest.transcript_reader import TranscriptReader, parse_transcript_row
from tests.fixture_paths import fixture_path
from tests.support import TRANSCRIPT_COLUMNS, write_transcripts_csv


def test_reader_yields_typed_rows_in_file_order() -> None:
    """Reader should parse every data row of the fixture in order."""
    with TranscriptReader(str(fixture_path("transcripts_small.csv"))) as reader:
        rows = list(reader)

    assert len(rows) == 8
    assert rows[0].cell_id_raw == "aaaaaaaa-1" and rows[0].x == 100.5
    assert rows[0].overlaps_nucleus is True and rows[1].overlaps_nucleus is False
    assert rows[0].fields["fov_name"] == "A1" and rows[0].line_number == 2
    assert reader.columns == TRANSCRIPT_COLUMNS


def test_reader_accepts_any_column_order(tmp_path: Path) -> None:
    """Columns should be matched by name, not position."""
    columns = (
        "qv",
        "feature_name",
        "z_location",
        "y_location",
        "x_location",
        "overlaps_nucleus",
        "cell_id",
    )
    source = write_transcripts_csv(
        tmp_path / "transcripts.csv",
        [(30.0, "Gene1", 1.0, 2.0, 3.0, "true", "baaaaaaa-1")],
        columns,
    )

    with TranscriptReader(str(source)) as reader:
        row = next(iter(reader))

    assert (row.x, row.y, row.z, row.qv) == (3.0, 2.0, 1.0, 30.0)
    assert row.cell_id_raw == "baaaaaaa-1" and row.overlaps_nucleus is True


def test_reader_reads_gzip_csv(tmp_path: Path) -> None:
    """Gzip-compressed CSV should be read transparently."""
    source = tmp_path / "transcripts.csv.gz"
    text = fixture_path("transcripts_small.csv").read_text(encoding="utf-8")
    with gzip.open(source, "wt", encoding="utf-8") as handle:
        handle.write(text)

    with TranscriptReader(str(source)) as reader:
        rows = list(reader)

    assert len(rows) == 8


def test_reader_raises_input_error_for_truncated_gzip(tmp_path: Path) -> None:
    """A gzip stream cut short should surface as an input error."""
    text = fixture_path("transcripts_small.csv").read_text(encoding="utf-8")
    compressed = gzip.compress(text.encode("utf-8"))
    source = tmp_path / "transcripts.csv.gz"
    source.write_bytes(compressed[: len(compressed) // 2])

    with pytest.raises(InputIoError, match="transcripts.csv.gz"):
        with TranscriptReader(str(source)) as reader:
            list(reader)

    assert source.stat().st_size < len(compressed)


def test_reader_strips_utf8_bom_from_header(tmp_path: Path) -> None:
    """A byte-order mark should not leak into the first column name."""
    text = fixture_path("transcripts_small.csv").read_text(encoding="utf-8")
    source = tmp_path / "transcripts.csv"
    source.write_text(text, encoding="utf-8-sig")

    with TranscriptReader(str(source)) as reader:
        rows = list(reader)

    assert reader.columns == TRANSCRIPT_COLUMNS
    assert len(rows) == 8


def test_reader_strips_utf8_bom_with_cell_id_first(tmp_path: Path) -> None:
    """A header starting with cell_id after a BOM should still validate."""
    columns = ("cell_id",) + tuple(
        column for column in TRANSCRIPT_COLUMNS if column != "cell_id"
    )
    plain = write_transcripts_csv(tmp_path / "plain.csv", [], columns)
    source = tmp_path / "transcripts.csv"
    source.write_bytes(b"\xef\xbb\xbf" + plain.read_bytes())

    with TranscriptReader(str(source)) as reader:
        rows = list(reader)

    assert reader.columns[0] == "cell_id"
    assert rows == []


def test_reader_reads_parquet(tmp_path: Path) -> None:
    """Parquet input should yield the same typed rows."""
    pa = pytest.importorskip("pyarrow")
    pq = pytest.importorskip("pyarrow.parquet")
    table = pa.table(
        {
            "cell_id": ["ffkpbaba-1", "UNASSIGNED"],
            "overlaps_nucleus": [1, 0],
            "feature_name": ["Gene1", "Gene2"],
            "x_location": [10.0, 20.0],
            "y_location": [30.0, 40.0],
            "z_location": [1.0, 2.0],
            "qv": [40.0, 12.5],
        }
    )
    source = tmp_path / "transcripts.parquet"
    pq.write_table(table, source)

    with TranscriptReader(str(source), parquet_batch_size=1) as reader:
        rows = list(reader)

    assert [row.cell_id_raw for row in rows] == ["ffkpbaba-1", "UNASSIGNED"]
    assert rows[1].qv == 12.5 and rows[1].overlaps_nucleus is False
    assert rows[1].line_number == 2


def test_reader_wraps_parquet_batch_errors(tmp_path: Path, monkeypatch) -> None:
    """Decode failures while streaming Parquet batches should be input errors."""
    pa = pytest.importorskip("pyarrow")
    pq = pytest.importorskip("pyarrow.parquet")
    source = tmp_path / "transcripts.parquet"
    pq.write_table(
        pa.table(
            {
                "cell_id": ["ffkpbaba-1"],
                "overlaps_nucleus": [1],
                "feature_name": ["Gene1"],
                "x_location": [10.0],
                "y_location": [30.0],
                "z_location": [1.0],
                "qv": [40.0],
            }
        ),
        source,
    )

    def _corrupt_batches(*args, **kwargs):
        raise pa.ArrowInvalid("Corrupt data page")
        yield

    with TranscriptReader(str(source)) as reader:
        monkeypatch.setattr(reader._parquet_file, "iter_batches", _corrupt_batches)
        with pytest.raises(InputIoError, match="Corrupt data page"):
            list(reader)

    assert source.exists()


def test_reader_raises_for_missing_file(tmp_path: Path) -> None:
    """Missing input should raise an input error."""
    missing_path = tmp_path / "does-not-exist.csv"

    with pytest.raises(InputIoError):
        TranscriptReader(str(missing_path)).open()

    assert missing_path.exists() is False


def test_reader_raises_for_missing_column(tmp_path: Path) -> None:
    """Header without a required column should raise a schema error."""
    columns = tuple(column for column in TRANSCRIPT_COLUMNS if column != "qv")
    source = write_transcripts_csv(tmp_path / "transcripts.csv", [], columns)

    with pytest.raises(SchemaError, match="qv"):
        TranscriptReader(str(source)).open()

    assert source.exists()


def test_reader_raises_for_empty_file(tmp_path: Path) -> None:
    """An empty file has no header and should raise a schema error."""
    source = tmp_path / "transcripts.csv"
    source.write_text("", encoding="utf-8")

    with pytest.raises(SchemaError, match="empty"):
        TranscriptReader(str(source)).open()

    assert source.exists()


def test_reader_raises_for_wrong_arity(tmp_path: Path) -> None:
    """Rows with a different field count than the header should fail."""
    source = write_transcripts_csv(
        tmp_path / "transcripts.csv",
        [(1, "aaaaaaaa-1", 1, "Gene1", 1.0, 2.0, 3.0, 30.0, "A1")],
    )

    with TranscriptReader(str(source)) as reader:
        with pytest.raises(SchemaError, match="expected 10 fields, got 9"):
            list(reader)

    assert source.exists()


def test_reader_skips_blank_lines(tmp_path: Path) -> None:
    """Blank lines between rows should be ignored."""
    source = tmp_path / "transcripts.csv"
    text = fixture_path("transcripts_small.csv").read_text(encoding="utf-8")
    source.write_text(text.replace("\n", "\n\n", 1), encoding="utf-8")

    with TranscriptReader(str(source)) as reader:
        rows = list(reader)

    assert len(rows) == 8


def test_parse_transcript_row_rejects_bad_number() -> None:
    """Non-numeric coordinates should raise a schema error naming the column."""
    values = {
        "cell_id": "aaaaaaaa-1",
        "x_location": "left",
        "y_location": "1.0",
        "z_location": "1.0",
        "feature_name": "Gene1",
        "qv": "30",
        "overlaps_nucleus": "1",
    }

    with pytest.raises(SchemaError, match="x_location"):
        parse_transcript_row(values, 7)

    assert values["x_location"] == "left"


def test_parse_transcript_row_rejects_bad_flag() -> None:
    """Nucleus flag must be 0/1 or true/false."""
    values = {
        "cell_id": "aaaaaaaa-1",
        "x_location": "1.0",
        "y_location": "1.0",
        "z_location": "1.0",
        "feature_name": "Gene1",
        "qv": "30",
        "overlaps_nucleus": "maybe",
    }

    with pytest.raises(SchemaError, match="overlaps_nucleus"):
        parse_transcript_row(values, 3)

    assert values["overlaps_nucleus"] == "maybe"
