"""Transcript filter CLI entry point.
This module parses command-line options, merges them with an optional
YAML config file, and maps filter failures onto exit codes.
"""

from __future__ import annotations

import argparse
from typing import Any, Sequence

from core.config import build_filter_config, load_filter_config
from core.constants import (
    CLI_PROG_NAME,
    DEFAULT_MAX_X,
    DEFAULT_MAX_Y,
    DEFAULT_MIN_QV,
    DEFAULT_MIN_X,
    DEFAULT_MIN_Y,
    DEFAULT_OUT_DIR,
    PACKAGE_VERSION,
)
from core.errors import TranscriptFilterError
from core.logging_config import configure_logging
from core.types import FilterConfig
from ingest.pipeline import run_filter

_OVERRIDE_KEYS = ("min_qv", "min_x", "max_x", "min_y", "max_y", "nucleus_only", "out_dir")


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog=CLI_PROG_NAME,
        description=(
            "Filter transcripts from a Xenium transcripts.csv based on Q-Score threshold "
            "and bounds on x and y coordinates. Remove negative controls and decode "
            "cell ids into integers for Baysor."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("in_file", help="Path to the transcripts.csv file produced by Xenium")
    parser.add_argument("--version", action="version", version=f"%(prog)s {PACKAGE_VERSION}")
    parser.add_argument("--config", help="Optional YAML file with filter parameters")
    _add_filter_arguments(parser)
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the transcript filter CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(quiet=args.quiet)
    try:
        config = resolve_filter_config(args)
        result = run_filter(args.in_file, config)
    except TranscriptFilterError as error:
        print(f"error={error}")
        return 1
    print(result.output_path)
    return 0


def resolve_filter_config(args: argparse.Namespace) -> FilterConfig:
    """Merge config file values with explicit command-line options.

    Args:
        args: Parsed CLI args.

    Returns:
        Validated filter config.

    Raises:
        ConfigError: If the config file or an option value is invalid.
    """
    base = load_filter_config(args.config) if args.config else FilterConfig()
    overrides = {
        key: getattr(args, key) for key in _OVERRIDE_KEYS if getattr(args, key) is not None
    }
    return build_filter_config(overrides, base)


def _add_filter_arguments(parser: Any) -> None:
    """Register filter parameter options."""
    parser.add_argument(
        "--min-qv",
        type=float,
        help=f"Minimum Q-Score to pass filtering (default: {DEFAULT_MIN_QV:g})",
    )
    parser.add_argument(
        "--min-x",
        type=float,
        help=f"Only keep transcripts with x at or above this value (default: {DEFAULT_MIN_X:g})",
    )
    parser.add_argument(
        "--max-x",
        type=float,
        help=(
            "Only keep transcripts with x at or below this value. "
            f"Xenium slides are <24000 microns in x and y (default: {DEFAULT_MAX_X:g})"
        ),
    )
    parser.add_argument(
        "--min-y",
        type=float,
        help=f"Only keep transcripts with y at or above this value (default: {DEFAULT_MIN_Y:g})",
    )
    parser.add_argument(
        "--max-y",
        type=float,
        help=(
            "Only keep transcripts with y at or below this value. "
            f"Xenium slides are <24000 microns in x and y (default: {DEFAULT_MAX_Y:g})"
        ),
    )
    parser.add_argument(
        "--nucleus-only",
        action=argparse.BooleanOptionalAction,
        default=None,
        help=(
            "Keep cell assignments only for transcripts that overlap the nucleus. "
            "--no-nucleus-only overrides a config file that enables it"
        ),
    )
    parser.add_argument(
        "--out-dir",
        help=(
            "Output directory. The file is named "
            "X{min_x}-{max_x}_Y{min_y}-{max_y}_filtered_transcripts_nucleus_only_{nucleus_only}.csv "
            f"(default: {DEFAULT_OUT_DIR})"
        ),
    )
