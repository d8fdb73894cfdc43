"""Public SDK surface for the transcript filter.

This module provides a stable import path for library users.
It re-exports the run entry point, decoder, and typed models.
"""

from __future__ import annotations

from core.config import build_filter_config, load_filter_config
from core.errors import (
    ConfigError,
    DecodeError,
    DependencyError,
    InputIoError,
    OutputIoError,
    SchemaError,
    TranscriptFilterError,
)
from core.types import FilterConfig, FilterRunResult, TranscriptRow
from export.transcript_writer import build_output_path
from ingest.pipeline import run_filter
from ingest.transcript_reader import TranscriptReader
from transforms.cell_id_decoding import decode_cell_id, encode_cell_id
from transforms.transcript_filtering import filter_transcripts

__all__ = [
    "ConfigError",
    "DecodeError",
    "DependencyError",
    "FilterConfig",
    "FilterRunResult",
    "InputIoError",
    "OutputIoError",
    "SchemaError",
    "TranscriptFilterError",
    "TranscriptReader",
    "TranscriptRow",
    "build_filter_config",
    "build_output_path",
    "decode_cell_id",
    "encode_cell_id",
    "filter_transcripts",
    "load_filter_config",
    "run_filter",
]
