"""CLI entry point for the hData conformance harness."""

import argparse
import asyncio
import json
import logging
import signal
import sys
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from hdata_conformance.config import load_config
from hdata_conformance.context import Context
from hdata_conformance.errors import ConfigurationError
from hdata_conformance.graph import DependencyGraph
from hdata_conformance.loading import load_test_units
from hdata_conformance.models.result import TestResult
from hdata_conformance.registry import TestRegistry
from hdata_conformance.runner import TestRunner

STATUS_SYMBOLS = {
    "success": "✓",
    "failed": "✗",
    "error": "!",
    "skipped": "-",
}

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_CONFIGURATION_ERROR = 2
EXIT_ABORTED = 130


def log_results_summary(log: logging.Logger, results: Sequence[TestResult]) -> None:
    """Log a formatted summary of test results."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for result in results:
        symbol = STATUS_SYMBOLS.get(result.status, "?")
        log.info(
            "%s %s %s: %s (%.2fs)",
            symbol,
            result.test_id,
            "MUST" if result.required else "SHOULD",
            result.status,
            result.duration,
        )
        log.info("  %s", result.name)
        if result.message:
            log.info("  Message: %s", result.message)


def parse_test_ids(tests: str) -> Sequence[str]:
    """Parse comma-separated test ids."""
    if not tests.strip():
        return ()
    return tuple(t.strip() for t in tests.split(",") if t.strip())


async def run(config_path: Path, test_ids: Sequence[str] = ()) -> int:
    """Run the conformance tests and return exit code."""
    log = logging.getLogger("hdata_conformance")

    try:
        config = load_config(config_path)
        registry = TestRegistry(load_test_units())
        graph = DependencyGraph.build(registry.values())
        if test_ids:
            registry = registry.select(graph.closure(test_ids))
            graph = DependencyGraph.build(registry.values())
    except ConfigurationError as e:
        log.error("Configuration error: %s", e)
        return EXIT_CONFIGURATION_ERROR

    order = graph.topological_order()
    log.info("Execution order: %s", ", ".join(order))

    try:
        async with Context.from_config(config) as context:
            runner = TestRunner(context=context)
            with _abort_on_signals(runner):
                await runner.run(order, registry)
    except ConfigurationError as e:
        log.error("Configuration error: %s", e)
        return EXIT_CONFIGURATION_ERROR

    results = context.reporter.all()
    log_results_summary(log, results)

    output = format_output(results)
    print(json.dumps(output, indent=2))

    if runner.aborted:
        log.warning("Run aborted before all tests completed")
        return EXIT_ABORTED

    has_failures = any(
        result.required and result.status in {"failed", "error"} for result in results
    )

    return EXIT_FAILURES if has_failures else EXIT_OK


@contextmanager
def _abort_on_signals(runner: TestRunner) -> Iterator[None]:
    """Record remaining tests as skipped when the operator interrupts the run."""
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, runner.abort)
        except (NotImplementedError, RuntimeError):  # pragma: no cover
            continue
        installed.append(sig)
    try:
        yield
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def format_output(results: Sequence[TestResult]) -> dict[str, Any]:
    """Format test results for JSON output."""
    all_results = [
        {
            "id": result.test_id,
            "name": result.name,
            "required": result.required,
            "status": result.status,
            "duration": result.duration,
            "message": result.message,
        }
        for result in results
    ]

    return {
        "total": len(all_results),
        "passed": sum(1 for r in all_results if r["status"] == "success"),
        "failed": sum(1 for r in all_results if r["status"] == "failed"),
        "errors": sum(1 for r in all_results if r["status"] == "error"),
        "skipped": sum(1 for r in all_results if r["status"] == "skipped"),
        "results": all_results,
    }


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run hData REST API conformance tests against a server"
    )
    parser.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Path to the JSON harness configuration",
    )
    parser.add_argument(
        "--tests",
        default="",
        help="Comma-separated test ids to run (prerequisites are added)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log HTTP exchanges at debug level",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(config_path=args.config, test_ids=parse_test_ids(args.tests))
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
