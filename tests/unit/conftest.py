"""Fixtures for unit tests."""

from unittest.mock import Mock

import aiohttp
import pytest

from hdata_conformance.context import Context
from hdata_conformance.testing.factories import HarnessConfigFactory


@pytest.fixture
def calls() -> list[str]:
    """Shared log of executed stub test ids."""
    return []


@pytest.fixture
def context() -> Context:
    """Create a context whose session must not be used."""
    return Context(
        config=HarnessConfigFactory.build(),
        session=Mock(spec=aiohttp.ClientSession),
    )
