"""Module test running the harness CLI against a WireMock hData server."""

import base64
import json
import subprocess
import sys
from pathlib import Path

from wiremock.client import (
    HttpMethods,
    Mapping,
    MappingRequest,
    MappingResponse,
    Mappings,
)

from hdata_conformance.testing.payloads import root_xml

RECORD_PATH = "/hdata/records/1"
BASIC_AUTH = "Basic " + base64.b64encode(b"tester@example.com:secret").decode()


def run_cli(config_path: Path, *args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, "-m", "hdata_conformance.cli", "--config", str(config_path), *args],
        capture_output=True,
        text=True,
        timeout=60,
    )


def stub_root_xml(status: int = 200) -> None:
    Mappings.create_mapping(
        Mapping(
            request=MappingRequest(
                method=HttpMethods.GET,
                url=f"{RECORD_PATH}/root.xml",
                headers={"Authorization": {"equalTo": BASIC_AUTH}},
            ),
            response=MappingResponse(
                status=status,
                headers={"Content-Type": "application/xml"},
                body=root_xml(),
            ),
        )
    )


def stub_conformant_writes() -> None:
    Mappings.create_mapping(
        Mapping(
            request=MappingRequest(method=HttpMethods.PUT, url=f"{RECORD_PATH}/root.xml"),
            response=MappingResponse(status=405),
        )
    )
    Mappings.create_mapping(
        Mapping(
            request=MappingRequest(
                method=HttpMethods.POST,
                url=f"{RECORD_PATH}/c32",
                headers={"Content-Type": {"equalTo": "application/xml"}},
            ),
            response=MappingResponse(
                status=201,
                headers={"Location": f"{RECORD_PATH}/c32/doc1"},
            ),
        )
    )
    Mappings.create_mapping(
        Mapping(
            request=MappingRequest(
                method=HttpMethods.POST,
                url=f"{RECORD_PATH}/c32",
                headers={"Content-Type": {"contains": "text/plain"}},
            ),
            response=MappingResponse(status=400),
        )
    )


def test_conformant_server_passes(config_path: Path) -> None:
    """All clause tests pass against a conformant server."""
    stub_root_xml()
    stub_conformant_writes()

    result = run_cli(config_path)

    assert result.returncode == 0, (
        f"cli failed:\nstdout: {result.stdout}\nstderr: {result.stderr}"
    )
    output = json.loads(result.stdout)
    assert output["total"] == 4
    assert output["passed"] == 4
    assert [r["id"] for r in output["results"]] == [
        "6.3.1.1",
        "6.3.2.2",
        "6.4.2.2",
        "6.4.2.4",
    ]


def test_failing_root_skips_dependents(config_path: Path) -> None:
    """A failing root.xml makes the run fail and skips document tests."""
    stub_root_xml(status=500)
    stub_conformant_writes()

    result = run_cli(config_path)

    assert result.returncode == 1, (
        f"expected failures:\nstdout: {result.stdout}\nstderr: {result.stderr}"
    )
    statuses = {r["id"]: r["status"] for r in json.loads(result.stdout)["results"]}
    assert statuses == {
        "6.3.1.1": "failed",
        "6.3.2.2": "success",
        "6.4.2.2": "skipped",
        "6.4.2.4": "skipped",
    }


def test_selected_tests_pull_in_prerequisites(config_path: Path) -> None:
    """Selecting a document test also runs the root.xml test it depends on."""
    stub_root_xml()
    stub_conformant_writes()

    result = run_cli(config_path, "--tests", "6.4.2.4")

    assert result.returncode == 0, result.stderr
    output = json.loads(result.stdout)
    assert [r["id"] for r in output["results"]] == ["6.3.1.1", "6.4.2.4"]


def test_invalid_configuration_exits_with_configuration_error(tmp_path: Path) -> None:
    """An unreadable configuration is reported without running any test."""
    result = run_cli(tmp_path / "missing.json")

    assert result.returncode == 2
    assert "Configuration error" in result.stderr
    assert result.stdout == ""
