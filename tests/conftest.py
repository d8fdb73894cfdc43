"""Pytest configuration for repository test runs."""

from __future__ import annotations

from typing import Iterator

import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Drop logging configuration bound to a previous test's capture streams."""
    yield
    structlog.reset_defaults()
