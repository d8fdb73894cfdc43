"""Transcript filter exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Every error is fatal for a run; the CLI maps them onto a non-zero exit.
"""

from __future__ import annotations


class TranscriptFilterError(Exception):
    """Base exception for all transcript filter failures."""


class ConfigError(TranscriptFilterError):
    """Raised for invalid filter configuration."""


class InputIoError(TranscriptFilterError):
    """Raised when the transcript source is missing or unreadable."""


class SchemaError(TranscriptFilterError):
    """Raised for missing columns, wrong row arity, or unparsable fields."""


class DecodeError(TranscriptFilterError):
    """Raised when an encoded cell id cannot be decoded."""


class OutputIoError(TranscriptFilterError):
    """Raised when the output file cannot be created or written."""


class DependencyError(TranscriptFilterError):
    """Raised when an optional runtime dependency is missing."""
