"""Scheduler executing test units in dependency order."""

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from hdata_conformance.context import Context
from hdata_conformance.errors import (
    AssertionFailure,
    SkippedPrecondition,
    StatusTransitionError,
)
from hdata_conformance.graph import DependencyGraph
from hdata_conformance.models.result import TerminalStatus, TestResult
from hdata_conformance.registry import TestRegistry
from hdata_conformance.units.base import Prerequisites, TestUnit

log = logging.getLogger(__name__)

RUN_ABORTED = "run aborted"


@dataclass(frozen=True, kw_only=True)
class TestRunner:
    """Executes test units one at a time in topological order.

    A unit runs only when every required prerequisite succeeded; otherwise it
    is recorded as skipped without being executed. Failures of a single unit
    are converted into its result and never stop the run.
    """

    __test__ = False

    context: Context
    _aborted: asyncio.Event = field(
        default_factory=asyncio.Event, init=False, repr=False
    )

    def abort(self) -> None:
        """Stop the run; units that have not started are recorded as skipped."""
        log.warning("Abort requested, remaining tests will be skipped")
        self._aborted.set()

    @property
    def aborted(self) -> bool:
        return self._aborted.is_set()

    async def run_all(self, units: Iterable[TestUnit]) -> Mapping[str, TestResult]:
        """Validate the dependency graph of the given units and run them all.

        Raises:
            ConfigurationError: If the units do not form a valid dependency graph

        """
        registry = TestRegistry(units)
        graph = DependencyGraph.build(registry.values())
        return await self.run(graph.topological_order(), registry)

    async def run(
        self, order: Sequence[str], registry: Mapping[str, TestUnit]
    ) -> Mapping[str, TestResult]:
        """Run the units in the given order.

        Args:
            order: Test ids such that prerequisites precede their dependents
            registry: Test unit instances keyed by test id

        Returns:
            Results keyed by test id, in execution order

        """
        reporter = self.context.reporter
        results: dict[str, TestResult] = {}

        log.info("Running %d test(s)...", len(order))
        for test_id in order:
            unit = registry[test_id]
            if unit.status != "not_run":
                raise StatusTransitionError(
                    f"Test {test_id} was already executed with status {unit.status}"
                )

            if self._aborted.is_set():
                result = self._skip(unit, RUN_ABORTED)
            elif (reason := self._blocking_prerequisite(unit, results)) is not None:
                result = self._skip(unit, reason)
            else:
                prerequisites = Prerequisites(
                    {
                        dep_id: registry[dep_id]
                        for dep in unit.declared_dependencies()
                        if (dep_id := dep.unit.test_id) in results
                    },
                    results,
                )
                result = await self._execute(unit, prerequisites)

            log.info(
                "Test completed: id=%s status=%s duration=%.2fs",
                result.test_id,
                result.status,
                result.duration,
            )
            results[test_id] = result
            reporter.record(result)

        return results

    def _blocking_prerequisite(
        self, unit: TestUnit, results: Mapping[str, TestResult]
    ) -> str | None:
        """Return why the unit cannot run, or None if all prerequisites allow it."""
        for dep in unit.declared_dependencies():
            dep_id = dep.unit.test_id
            dep_result = results.get(dep_id)
            if dep_result is not None and dep_result.status == "success":
                continue
            if dep.advisory:
                log.info(
                    "Advisory prerequisite %s of %s did not succeed, running anyway",
                    dep_id,
                    unit.test_id,
                )
                continue
            if dep_result is None:
                return f"Prerequisite {dep_id} has no result"
            return f"Prerequisite {dep_id} {dep_result.status}"
        return None

    def _skip(self, unit: TestUnit, reason: str) -> TestResult:
        log.info("Skipping test %s: %s", unit.test_id, reason)
        unit.set_status("skipped", reason)
        return self._result(unit, "skipped", reason, 0.0)

    async def _execute(self, unit: TestUnit, prerequisites: Prerequisites) -> TestResult:
        log.info("Executing test %s: %s", unit.test_id, unit.name)
        loop = asyncio.get_running_loop()
        started = loop.time()

        status: TerminalStatus
        message: str | None
        try:
            await unit.execute(self.context, prerequisites)
        except AssertionFailure as e:
            status, message = "failed", str(e)
        except SkippedPrecondition as e:
            status, message = "skipped", str(e)
        except Exception as e:
            log.error("Test %s raised an error: %s", unit.test_id, e, exc_info=e)
            status, message = "error", f"{type(e).__name__}: {e}"
        else:
            if unit.status == "not_run":
                status, message = "error", "Test completed without reporting a status"
            else:
                status, message = unit.status, unit.message

        if unit.status == "not_run":
            unit.set_status(status, message)
        return self._result(unit, status, message, loop.time() - started)

    @staticmethod
    def _result(
        unit: TestUnit, status: TerminalStatus, message: str | None, duration: float
    ) -> TestResult:
        return TestResult(
            test_id=unit.test_id,
            name=unit.name,
            status=status,
            required=unit.required,
            message=message,
            duration=duration,
        )
