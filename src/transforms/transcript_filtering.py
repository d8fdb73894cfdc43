"""Row-level transcript filtering.

Rows pass through fixed predicates before their cell id is decoded.
In nucleus-only mode, transcripts outside the nucleus lose their cell.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import replace
from typing import Iterable, Iterator

from core.constants import (
    CELL_ID_COLUMN,
    DROP_LOW_QUALITY,
    DROP_NEGATIVE_CONTROL,
    DROP_OUT_OF_BOUNDS,
    DROP_REASONS,
    NEGATIVE_CONTROL_PREFIXES,
    UNASSIGNED_CELL_ID,
)
from core.errors import DecodeError
from core.types import FilterConfig, FilterOutcome, TranscriptRow
from transforms.cell_id_decoding import decode_cell_id


class FilterTally:
    """Running counts of filter outcomes for run summaries."""

    def __init__(self) -> None:
        self.input_count = 0
        self.output_count = 0
        self.detached_count = 0
        self.drop_counts: Counter[str] = Counter({reason: 0 for reason in DROP_REASONS})

    def count_input(self) -> None:
        """Count one row read from the source, before it is evaluated."""
        self.input_count += 1

    def record(self, outcome: FilterOutcome) -> None:
        """Count the outcome of one evaluated row."""
        if outcome.drop_reason is not None:
            self.drop_counts[outcome.drop_reason] += 1
            return
        self.output_count += 1
        if outcome.detached:
            self.detached_count += 1


def filter_transcripts(
    rows: Iterable[TranscriptRow],
    config: FilterConfig,
    tally: FilterTally | None = None,
) -> Iterator[TranscriptRow]:
    """Lazily yield transformed rows that pass the filter.

    Args:
        rows: Source rows, consumed once in order.
        config: Filter parameters.
        tally: Optional counter updated for every evaluated row.

    Yields:
        Kept rows with a decoded ``cell_id``, in source order.

    Raises:
        DecodeError: If a kept row has a malformed cell id.
    """
    for row in rows:
        if tally is not None:
            tally.count_input()
        outcome = evaluate_transcript(row, config)
        if tally is not None:
            tally.record(outcome)
        if outcome.row is not None:
            yield outcome.row


def evaluate_transcript(row: TranscriptRow, config: FilterConfig) -> FilterOutcome:
    """Evaluate one row against the filter.

    Checks run in a fixed order and the first failing check drops the row.
    Cell ids are decoded only for rows that pass every check.

    Args:
        row: Source row.
        config: Filter parameters.

    Returns:
        Outcome holding the transformed row, or the drop reason.

    Raises:
        DecodeError: If the row's cell id is malformed.
    """
    if is_negative_control(row.feature_name):
        return FilterOutcome(row=None, drop_reason=DROP_NEGATIVE_CONTROL)
    if not passes_quality(row, config.min_qv):
        return FilterOutcome(row=None, drop_reason=DROP_LOW_QUALITY)
    if not within_bounds(row, config):
        return FilterOutcome(row=None, drop_reason=DROP_OUT_OF_BOUNDS)
    try:
        cell_id = decode_cell_id(row.cell_id_raw)
    except DecodeError as error:
        raise DecodeError(
            f"Invalid value in column '{CELL_ID_COLUMN}' at row {row.line_number}: {error}"
        ) from error
    detached = config.nucleus_only and not row.overlaps_nucleus
    if detached:
        cell_id = UNASSIGNED_CELL_ID
    return FilterOutcome(row=replace(row, cell_id=cell_id), detached=detached)


def is_negative_control(feature_name: str) -> bool:
    """Return whether a feature name belongs to a negative-control probe."""
    return feature_name.startswith(NEGATIVE_CONTROL_PREFIXES)


def passes_quality(row: TranscriptRow, min_qv: float) -> bool:
    """Return whether the row's Q-Score reaches the threshold."""
    return row.qv >= min_qv


def within_bounds(row: TranscriptRow, config: FilterConfig) -> bool:
    """Return whether x and y lie inside the inclusive bounding box."""
    return (
        config.min_x <= row.x <= config.max_x
        and config.min_y <= row.y <= config.max_y
    )
