"""Fixtures for integration tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from aioresponses import aioresponses as aioresponses_cls

from hdata_conformance.config import HarnessConfig
from hdata_conformance.context import Context
from hdata_conformance.testing.factories import HarnessConfigFactory

BASE_URL = "http://hdata.test/records/1/"
C32_EXTENSION = "http://projecthdata.org/extension/c32"


@pytest.fixture
def document_file(tmp_path: Path) -> Path:
    """Create a section document to upload."""
    path = tmp_path / "c32.xml"
    path.write_text('<?xml version="1.0"?><ClinicalDocument/>')
    return path


@pytest.fixture
def config(document_file: Path) -> HarnessConfig:
    """Create test configuration."""
    return HarnessConfigFactory.build(
        base_url=BASE_URL,
        properties={
            "document.extension": C32_EXTENSION,
            "document.file": str(document_file),
        },
    )


@pytest.fixture
async def context(
    config: HarnessConfig, aioresponses: aioresponses_cls
) -> AsyncGenerator[Context, None]:
    """Create context with managed session."""
    async with Context.from_config(config) as impl:
        yield impl
