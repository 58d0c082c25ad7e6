"""Registry of test unit instances keyed by clause id."""

from collections.abc import Iterable, Iterator, Mapping

from hdata_conformance.errors import DuplicateTestError
from hdata_conformance.units.base import TestUnit


class TestRegistry(Mapping[str, TestUnit]):
    """Test units of one run, in registration order."""

    __test__ = False

    def __init__(self, units: Iterable[TestUnit]) -> None:
        self._units: dict[str, TestUnit] = {}
        for unit in units:
            if unit.test_id in self._units:
                raise DuplicateTestError(
                    f"Test id {unit.test_id} registered by both "
                    f"{type(self._units[unit.test_id]).__name__} and {type(unit).__name__}"
                )
            self._units[unit.test_id] = unit

    def __getitem__(self, test_id: str) -> TestUnit:
        return self._units[test_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._units)

    def __len__(self) -> int:
        return len(self._units)

    def select(self, test_ids: Iterable[str]) -> "TestRegistry":
        """Return a registry with only the given ids, keeping registration order."""
        wanted = set(test_ids)
        return TestRegistry(unit for test_id, unit in self._units.items() if test_id in wanted)
