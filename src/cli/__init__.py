"""Command-line interface for the transcript filter."""
