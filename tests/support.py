"""Row builders shared by transcript filter tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence

from core.types import TranscriptRow

TRANSCRIPT_COLUMNS = (
    "transcript_id",
    "cell_id",
    "overlaps_nucleus",
    "feature_name",
    "x_location",
    "y_location",
    "z_location",
    "qv",
    "fov_name",
    "nucleus_distance",
)


def make_transcript_row(**overrides: Any) -> TranscriptRow:
    """Build a row that passes the default filter unless overridden."""
    values: dict[str, Any] = {
        "cell_id_raw": "aaaaaaaa-1",
        "x": 100.0,
        "y": 100.0,
        "z": 100.0,
        "feature_name": "Gene1",
        "qv": 25.0,
        "overlaps_nucleus": True,
        "fields": {},
    }
    values.update(overrides)
    return TranscriptRow(**values)


def write_transcripts_csv(
    path: Path,
    rows: Sequence[Sequence[object]],
    columns: Sequence[str] = TRANSCRIPT_COLUMNS,
) -> Path:
    """Write a small transcripts CSV for reader and pipeline tests."""
    lines = [",".join(columns)]
    lines.extend(",".join(str(value) for value in row) for row in rows)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path

