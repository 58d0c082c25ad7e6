"""Fixtures for module tests using WireMock testcontainers."""

import json
from collections.abc import Generator
from pathlib import Path

import pytest
from testcontainers.core import testcontainers_config
from wiremock.constants import Config
from wiremock.client import Mappings
from wiremock.testing.testcontainer import WireMockContainer

C32_EXTENSION = "http://projecthdata.org/extension/c32"


@pytest.fixture(scope="session", autouse=True)
def _disable_ryuk() -> None:
    """Disable the extra cleanup instance, we use contexts to clean containers."""
    testcontainers_config.ryuk_disabled = True


@pytest.fixture(scope="session")
def wiremock_server() -> Generator[WireMockContainer, None, None]:
    """Start WireMock container using wiremock's testcontainer support."""
    with WireMockContainer(secure=False) as wm:
        Config.base_url = wm.get_url("__admin")
        yield wm
        print(wm.get_logs())


@pytest.fixture
def base_url(wiremock_server: WireMockContainer) -> Generator[str, None, None]:
    """Base URL of the stubbed hData record, with mappings reset around each test."""
    Mappings.delete_all_mappings()
    yield wiremock_server.get_url("hdata/records/1/")
    Mappings.delete_all_mappings()


@pytest.fixture
def config_path(tmp_path: Path, base_url: str) -> Path:
    """Write a harness configuration pointing at WireMock."""
    document = tmp_path / "c32.xml"
    document.write_text('<?xml version="1.0"?><ClinicalDocument/>')

    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "base_url": base_url,
                "timeout": 10,
                "request_checker": "basic-auth",
                "properties": {
                    "document.extension": C32_EXTENSION,
                    "document.file": str(document),
                },
                "users": {
                    "defaultUser": {
                        "email": "tester@example.com",
                        "password": "secret",
                    }
                },
            }
        )
    )
    return path
