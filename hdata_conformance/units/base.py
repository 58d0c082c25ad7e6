"""Abstract base class for conformance test units."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, NoReturn

import aiohttp

from hdata_conformance.errors import (
    AssertionFailure,
    SkippedPrecondition,
    StatusTransitionError,
)
from hdata_conformance.models.result import Status, TestResult

if TYPE_CHECKING:
    from hdata_conformance.context import Context

log = logging.getLogger(__name__)

MIME_APPLICATION_XML = "application/xml"
MIME_TEXT_PLAIN = "text/plain"


@dataclass(frozen=True)
class Dependency:
    """A declared prerequisite of a test unit.

    Advisory dependencies are executed first but do not gate the dependent.
    """

    unit: "type[TestUnit]"
    advisory: bool = False


class TestUnit(ABC):
    """A check of one clause of the hData REST specification.

    Subclasses declare their identity and prerequisites as class attributes
    and implement ``execute``. A unit instance is executed at most once and its
    status moves from ``not_run`` to a terminal value exactly once.
    """

    __test__ = False

    test_id: ClassVar[str]
    name: ClassVar[str]
    required: ClassVar[bool] = True
    dependencies: ClassVar[Sequence["type[TestUnit] | Dependency"]] = ()

    def __init__(self) -> None:
        self._status: Status = "not_run"
        self._message: str | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(test_id={self.test_id!r}, status={self._status!r})"

    @classmethod
    def declared_dependencies(cls) -> Sequence[Dependency]:
        """Return the declared prerequisites in declaration order."""
        return tuple(
            dep if isinstance(dep, Dependency) else Dependency(dep)
            for dep in cls.dependencies
        )

    @property
    def status(self) -> Status:
        return self._status

    @property
    def message(self) -> str | None:
        return self._message

    def set_status(self, status: Status, message: str | None = None) -> None:
        """Assign the terminal status of this unit.

        Raises:
            StatusTransitionError: If the unit already has a terminal status or
                the given status is not terminal

        """
        if status == "not_run":
            raise StatusTransitionError(f"Test {self.test_id} cannot be reset")
        if self._status != "not_run":
            raise StatusTransitionError(
                f"Test {self.test_id} already finished with status {self._status}"
            )
        self._status = status
        self._message = message

    @abstractmethod
    async def execute(self, context: "Context", prerequisites: "Prerequisites") -> None:
        """Run the check against the server and set a terminal status.

        Args:
            context: Shared configuration and HTTP transport
            prerequisites: Executed prerequisite units, for cross-unit data

        Raises:
            AssertionFailure: If the server response is not conformant
            SkippedPrecondition: If a precondition of the check is not met

        """

    def assert_equals(self, expected: Any, actual: Any, message: str) -> None:
        if expected != actual:
            raise AssertionFailure(f"{message}: expected {expected!r} but was {actual!r}")

    def skip(self, message: str) -> NoReturn:
        log.warning("Skipping %s: %s", self.test_id, message)
        raise SkippedPrecondition(message)


class Prerequisites:
    """Read-only view of the executed prerequisites of one test unit.

    Statuses are read from the recorded results when given. A unit that raised
    after setting its own status is recorded from the exception.
    """

    def __init__(
        self,
        units: Mapping[str, TestUnit],
        results: Mapping[str, TestResult] | None = None,
    ) -> None:
        self._units = dict(units)
        self._results = dict(results or {})

    def __contains__(self, unit_cls: object) -> bool:
        return isinstance(unit_cls, type) and getattr(unit_cls, "test_id", None) in self._units

    def get[U: TestUnit](self, unit_cls: type[U]) -> U:
        """Return the executed instance of a declared prerequisite.

        Raises:
            KeyError: If the unit is not a declared prerequisite with a result

        """
        unit = self._units[unit_cls.test_id]
        if not isinstance(unit, unit_cls):
            raise TypeError(
                f"Registered test {unit_cls.test_id} is {type(unit).__name__}, "
                f"not {unit_cls.__name__}"
            )
        return unit

    def status(self, unit_cls: type[TestUnit]) -> Status:
        unit = self._units[unit_cls.test_id]
        if (result := self._results.get(unit.test_id)) is not None:
            return result.status
        return unit.status


def dump_response(method: str, response: aiohttp.ClientResponse) -> None:
    """Log the status line and headers of a response at debug level."""
    if not log.isEnabledFor(logging.DEBUG):
        return
    log.debug("%s %s -> %d", method, response.url, response.status)
    for name, value in response.headers.items():
        log.debug("\t%s: %s", name, value)
