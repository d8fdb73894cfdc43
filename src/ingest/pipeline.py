"""Transcript filter orchestration.

This module opens the transcript source and the output sink, streams
rows through the filter, and logs a summary of the completed run.
"""

from __future__ import annotations

from contextlib import ExitStack

from core.config import validate_filter_config
from core.errors import TranscriptFilterError
from core.logging_config import get_logger
from core.types import FilterConfig, FilterRunResult
from export.transcript_writer import TranscriptCsvWriter, build_output_path
from ingest.transcript_reader import TranscriptReader
from transforms.transcript_filtering import FilterTally, filter_transcripts

_LOGGER = get_logger(__name__)


class TranscriptFilterRunner:
    """Single-pass runner from transcript table to filtered CSV."""

    def __init__(self, source_path: str, config: FilterConfig) -> None:
        validate_filter_config(config)
        self._source_path = source_path
        self._config = config
        self._output_path = build_output_path(config)

    def run(self) -> FilterRunResult:
        """Filter the whole source and return the run summary.

        Source and output are closed on every exit path. A fatal error
        leaves the partially written output file in place.

        Raises:
            TranscriptFilterError: On any input, schema, decode, or output failure.
        """
        _LOGGER.info(
            "filter_started",
            source_path=self._source_path,
            output_path=str(self._output_path),
            **_config_fields(self._config),
        )
        tally = FilterTally()
        try:
            self._stream(tally)
        except TranscriptFilterError as error:
            _LOGGER.error(
                "filter_failed",
                source_path=self._source_path,
                error_type=type(error).__name__,
                error=str(error),
                rows_read=tally.input_count,
                rows_written=tally.output_count,
            )
            raise
        result = FilterRunResult(
            output_path=str(self._output_path),
            input_count=tally.input_count,
            output_count=tally.output_count,
            drop_counts=dict(tally.drop_counts),
            detached_count=tally.detached_count,
        )
        _log_filter_completion(self._source_path, result)
        return result

    def _stream(self, tally: FilterTally) -> None:
        with ExitStack() as stack:
            reader = stack.enter_context(TranscriptReader(self._source_path))
            writer = stack.enter_context(TranscriptCsvWriter(self._output_path, reader.columns))
            for row in filter_transcripts(reader, self._config, tally):
                writer.write(row)


def run_filter(source_path: str, config: FilterConfig) -> FilterRunResult:
    """Filter a Xenium transcript table into a segmentation-ready CSV.

    Args:
        source_path: Path to ``transcripts.csv`` (or ``.csv.gz`` / ``.parquet``).
        config: Filter parameters.

    Returns:
        Summary of the run, including the output path.

    Raises:
        InputIoError: If the source cannot be read.
        SchemaError: If the source has missing columns or malformed rows.
        DecodeError: If a kept row has a malformed cell id.
        OutputIoError: If the output cannot be written.
    """
    runner = TranscriptFilterRunner(source_path, config)
    return runner.run()


def _config_fields(config: FilterConfig) -> dict[str, object]:
    return {
        "min_qv": config.min_qv,
        "min_x": config.min_x,
        "max_x": config.max_x,
        "min_y": config.min_y,
        "max_y": config.max_y,
        "nucleus_only": config.nucleus_only,
    }


def _log_filter_completion(source_path: str, result: FilterRunResult) -> None:
    """Log run completion with contextual counts."""
    _LOGGER.info(
        "filter_completed",
        source_path=source_path,
        output_path=result.output_path,
        input_count=result.input_count,
        output_count=result.output_count,
        detached_count=result.detached_count,
        **{f"dropped_{reason}": count for reason, count in result.drop_counts.items()},
    )
