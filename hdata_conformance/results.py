"""Append-only sink for test results."""

from collections.abc import Iterator, Mapping, Sequence

from hdata_conformance.errors import DuplicateResultError
from hdata_conformance.models.result import TERMINAL_STATUSES, TerminalStatus, TestResult


class ResultAggregator:
    """Collects one result per test unit in the order they were recorded."""

    def __init__(self) -> None:
        self._results: dict[str, TestResult] = {}

    def __len__(self) -> int:
        return len(self._results)

    def __contains__(self, test_id: object) -> bool:
        return test_id in self._results

    def __iter__(self) -> Iterator[TestResult]:
        return iter(self._results.values())

    def record(self, result: TestResult) -> None:
        """Store the result of a test unit.

        Raises:
            DuplicateResultError: If a result for the same test id already exists

        """
        if result.test_id in self._results:
            raise DuplicateResultError(
                f"Result for test {result.test_id} was already recorded"
            )
        self._results[result.test_id] = result

    def get(self, test_id: str) -> TestResult | None:
        return self._results.get(test_id)

    def all(self) -> Sequence[TestResult]:
        return list(self._results.values())

    def summary(self) -> Mapping[TerminalStatus, int]:
        counts = dict.fromkeys(TERMINAL_STATUSES, 0)
        for result in self._results.values():
            counts[result.status] += 1
        return counts
