"""Xenium cell id decoding.

Xenium writes cell ids as short strings over the letters ``a``-``p``
followed by a dataset suffix, e.g. ``ffkpbaba-1``. Each letter is one
base-16 digit, least significant first. Decoded ids are offset by one so
that ``0`` stays reserved for transcripts not assigned to any cell.
"""

from __future__ import annotations

from core.constants import (
    CELL_ID_ALPHABET,
    CELL_ID_SUFFIX_SEPARATOR,
    DEFAULT_CELL_ID_WIDTH,
    DEFAULT_DATASET_SUFFIX,
    UNASSIGNED_CELL_ID,
    UNASSIGNED_CELL_IDS,
)
from core.errors import DecodeError

_BASE = len(CELL_ID_ALPHABET)
_DIGITS = {character: digit for digit, character in enumerate(CELL_ID_ALPHABET)}


def is_unassigned(raw: str) -> bool:
    """Return whether a raw cell id is an unassigned sentinel."""
    return raw in UNASSIGNED_CELL_IDS


def split_cell_id(raw: str) -> tuple[str, int | None]:
    """Split an encoded cell id into prefix and dataset suffix.

    Args:
        raw: Encoded cell id, with or without ``-<suffix>``.

    Returns:
        The encoded prefix and the integer suffix, ``None`` when absent.

    Raises:
        DecodeError: If the suffix is not a decimal integer.
    """
    prefix, separator, suffix = raw.rpartition(CELL_ID_SUFFIX_SEPARATOR)
    if not separator:
        return raw, None
    if not (suffix.isascii() and suffix.isdigit()):
        raise DecodeError(
            f"Invalid cell id '{raw}': dataset suffix '{suffix}' is not an integer."
        )
    return prefix, int(suffix)


def decode_cell_id(raw: str) -> int:
    """Decode a Xenium cell id into a positive integer.

    Args:
        raw: Encoded cell id such as ``ffkpbaba-1`` or an unassigned sentinel.

    Returns:
        ``0`` for unassigned sentinels, otherwise the decoded id (>= 1).

    Raises:
        DecodeError: If the prefix is empty or holds a character outside
            the ``a``-``p`` alphabet.
    """
    if is_unassigned(raw):
        return UNASSIGNED_CELL_ID
    prefix, _ = split_cell_id(raw)
    if not prefix:
        raise DecodeError(f"Invalid cell id '{raw}': encoded prefix is empty.")
    value = 0
    for position, character in enumerate(prefix):
        digit = _DIGITS.get(character)
        if digit is None:
            raise DecodeError(
                f"Invalid cell id '{raw}': character '{character}' at position {position} "
                f"is outside the alphabet '{CELL_ID_ALPHABET}'."
            )
        value += digit * _BASE**position
    return value + 1


def encode_cell_id(
    cell_id: int,
    width: int = DEFAULT_CELL_ID_WIDTH,
    dataset_suffix: int | None = DEFAULT_DATASET_SUFFIX,
) -> str:
    """Encode a positive integer cell id, the inverse of ``decode_cell_id``.

    Args:
        cell_id: Decoded cell id, at least 1.
        width: Number of encoded characters, padded with ``a``.
        dataset_suffix: Suffix appended after ``-``; omitted when ``None``.

    Returns:
        Encoded cell id string.

    Raises:
        ValueError: If the id is below 1 or does not fit in ``width`` digits.
    """
    if cell_id < 1:
        raise ValueError(f"Cell id must be >= 1 to encode, got {cell_id}.")
    value = cell_id - 1
    if value >= _BASE**width:
        raise ValueError(f"Cell id {cell_id} does not fit in {width} encoded characters.")
    characters = []
    for _ in range(width):
        value, digit = divmod(value, _BASE)
        characters.append(CELL_ID_ALPHABET[digit])
    prefix = "".join(characters)
    if dataset_suffix is None:
        return prefix
    return f"{prefix}{CELL_ID_SUFFIX_SEPARATOR}{dataset_suffix}"
