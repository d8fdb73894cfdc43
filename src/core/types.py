"""Shared typed models.

This module defines immutable data models used by the reader,
filter transforms, writer, and CLI layers to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from core.constants import (
    DEFAULT_MAX_X,
    DEFAULT_MAX_Y,
    DEFAULT_MIN_QV,
    DEFAULT_MIN_X,
    DEFAULT_MIN_Y,
    DEFAULT_NUCLEUS_ONLY,
    DEFAULT_OUT_DIR,
)


@dataclass(frozen=True)
class TranscriptRow:
    """One detected molecule read from a transcript table.

    Attributes:
        cell_id_raw: Encoded cell id or unassigned sentinel as read.
        x: X coordinate in microns.
        y: Y coordinate in microns.
        z: Z coordinate in microns.
        feature_name: Gene or probe label.
        qv: Phred-scaled quality score.
        overlaps_nucleus: Whether the transcript lies inside a nucleus.
        fields: Every source column mapped to its raw value, in input order.
        cell_id: Decoded cell id, ``None`` until decoded, ``0`` if unassigned.
        line_number: One-based source row number for error context.
    """

    cell_id_raw: str
    x: float
    y: float
    z: float
    feature_name: str
    qv: float
    overlaps_nucleus: bool
    fields: Mapping[str, str] = field(default_factory=dict)
    cell_id: int | None = None
    line_number: int = 0


@dataclass(frozen=True)
class FilterConfig:
    """Filter parameters for one run.

    Attributes:
        min_qv: Rows with ``qv`` below this value are dropped.
        min_x: Lower inclusive bound on x.
        max_x: Upper inclusive bound on x.
        min_y: Lower inclusive bound on y.
        max_y: Upper inclusive bound on y.
        nucleus_only: Detach transcripts outside the nucleus from their cell.
        out_dir: Destination directory for the output file.
    """

    min_qv: float = DEFAULT_MIN_QV
    min_x: float = DEFAULT_MIN_X
    max_x: float = DEFAULT_MAX_X
    min_y: float = DEFAULT_MIN_Y
    max_y: float = DEFAULT_MAX_Y
    nucleus_only: bool = DEFAULT_NUCLEUS_ONLY
    out_dir: str = DEFAULT_OUT_DIR


@dataclass(frozen=True)
class FilterOutcome:
    """Result of evaluating one row against the filter.

    Attributes:
        row: Transformed row when kept, otherwise ``None``.
        drop_reason: Reason identifier when dropped.
        detached: Whether the nucleus rule removed the cell assignment.
    """

    row: TranscriptRow | None
    drop_reason: str | None = None
    detached: bool = False


@dataclass(frozen=True)
class FilterRunResult:
    """Summary of one completed filter run.

    Attributes:
        output_path: Written CSV path.
        input_count: Number of rows read.
        output_count: Number of rows written.
        drop_counts: Dropped rows per reason.
        detached_count: Kept rows whose cell id was reset by the nucleus rule.
    """

    output_path: str
    input_count: int
    output_count: int
    drop_counts: Mapping[str, int]
    detached_count: int
