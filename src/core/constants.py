"""Core constants used across transcript filter modules.

This module centralizes Xenium schema names and filter defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

DEFAULT_MIN_QV = 20.0
DEFAULT_MIN_X = 0.0
# Xenium slides are smaller than 24000 microns in x and y.
DEFAULT_MAX_X = 24000.0
DEFAULT_MIN_Y = 0.0
DEFAULT_MAX_Y = 24000.0
DEFAULT_NUCLEUS_ONLY = False
DEFAULT_OUT_DIR = "."

CELL_ID_ALPHABET = "abcdefghijklmnop"
CELL_ID_SUFFIX_SEPARATOR = "-"
DEFAULT_CELL_ID_WIDTH = 8
DEFAULT_DATASET_SUFFIX = 1
UNASSIGNED_CELL_IDS = ("-1", "UNASSIGNED")
UNASSIGNED_CELL_ID = 0

NEGATIVE_CONTROL_PREFIXES = (
    "NegControlProbe_",
    "antisense_",
    "NegControlCodeword_",
    "BLANK_",
)

CELL_ID_COLUMN = "cell_id"
X_COLUMN = "x_location"
Y_COLUMN = "y_location"
Z_COLUMN = "z_location"
FEATURE_NAME_COLUMN = "feature_name"
QV_COLUMN = "qv"
NUCLEUS_COLUMN = "overlaps_nucleus"
REQUIRED_COLUMNS = (
    CELL_ID_COLUMN,
    X_COLUMN,
    Y_COLUMN,
    Z_COLUMN,
    FEATURE_NAME_COLUMN,
    QV_COLUMN,
    NUCLEUS_COLUMN,
)
TRUE_FLAG_VALUES = ("1", "true")
FALSE_FLAG_VALUES = ("0", "false")

OUTPUT_FILE_TEMPLATE = (
    "X{min_x}-{max_x}_Y{min_y}-{max_y}_filtered_transcripts_nucleus_only_{nucleus_only}.csv"
)
GZIP_SUFFIX = ".gz"
PARQUET_SUFFIX = ".parquet"
DEFAULT_PARQUET_BATCH_SIZE = 65536

DROP_NEGATIVE_CONTROL = "negative_control"
DROP_LOW_QUALITY = "low_quality"
DROP_OUT_OF_BOUNDS = "out_of_bounds"
DROP_REASONS = (DROP_NEGATIVE_CONTROL, DROP_LOW_QUALITY, DROP_OUT_OF_BOUNDS)

PACKAGE_VERSION = "1.0.0"
CLI_PROG_NAME = "xenium-filter-transcripts"
