"""Shared fixtures for all test suites."""

from collections.abc import Generator

import pytest
from aioresponses import aioresponses as aioresponses_cls


@pytest.fixture
def aioresponses() -> Generator[aioresponses_cls, None, None]:
    """Intercept aiohttp requests; unmatched requests raise a connection error."""
    with aioresponses_cls() as mock:
        yield mock
