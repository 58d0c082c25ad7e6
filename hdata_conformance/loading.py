"""Loading of test units and request checkers from entry points."""

import logging
from collections.abc import Sequence
from importlib.metadata import entry_points

from hdata_conformance.auth.base import RequestChecker
from hdata_conformance.errors import ConfigurationError, RequestCheckerNotFoundError
from hdata_conformance.units.base import TestUnit

log = logging.getLogger(__name__)

TESTS_ENTRY_POINT_GROUP = "hdata_conformance.tests"
REQUEST_CHECKERS_ENTRY_POINT_GROUP = "hdata_conformance.request_checkers"


def load_test_units() -> Sequence[TestUnit]:
    """Instantiate every registered test unit in declaration order.

    Raises:
        ConfigurationError: If an entry point does not reference a TestUnit

    """
    units: list[TestUnit] = []
    for entry in entry_points(group=TESTS_ENTRY_POINT_GROUP):
        unit_cls = entry.load()
        if not isinstance(unit_cls, type) or not issubclass(unit_cls, TestUnit):
            raise ConfigurationError(
                f"Entry point '{entry.name}' does not reference a TestUnit class"
            )
        units.append(unit_cls())
    log.debug("Loaded %d test unit(s)", len(units))
    return units


def load_request_checker(key: str) -> RequestChecker:
    """Load and instantiate a request checker by key.

    Args:
        key: The checker key as registered in pyproject.toml (e.g., "basic-auth")

    Returns:
        A new request checker instance

    Raises:
        RequestCheckerNotFoundError: If no checker with the given key is found

    """
    entries = entry_points(group=REQUEST_CHECKERS_ENTRY_POINT_GROUP)

    for entry in entries:
        if entry.name == key:
            checker_cls: type[RequestChecker] = entry.load()
            return checker_cls()

    available = [e.name for e in entries]
    raise RequestCheckerNotFoundError(
        f"Request checker '{key}' not found. Available request checkers: {available}"
    )
