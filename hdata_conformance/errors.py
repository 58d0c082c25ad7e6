"""Error types raised by the conformance harness."""

from collections.abc import Sequence


class ConformanceError(Exception):
    """Base class for harness errors."""


class ConfigurationError(ConformanceError):
    """Raised before a run starts when the harness cannot be set up."""


class DuplicateTestError(ConfigurationError):
    """Raised when two registered test units share the same id."""


class UnknownTestError(ConfigurationError):
    """Raised when a requested test id is not registered."""


class UnknownDependencyError(ConfigurationError):
    """Raised when a test unit depends on an id that is not registered."""

    def __init__(self, test_id: str, dependency_id: str) -> None:
        super().__init__(
            f"Test {test_id} depends on {dependency_id}, which is not registered"
        )
        self.test_id = test_id
        self.dependency_id = dependency_id


class DependencyCycleError(ConfigurationError):
    """Raised when declared dependencies form a cycle."""

    def __init__(self, cycle: Sequence[str]) -> None:
        super().__init__(f"Dependency cycle detected: {' -> '.join(cycle)}")
        self.cycle = tuple(cycle)


class RequestCheckerNotFoundError(ConfigurationError):
    """Raised when a request checker is not found."""


class AssertionFailure(ConformanceError):
    """The server response did not match the required outcome."""


class SkippedPrecondition(ConformanceError):
    """A precondition of a test unit was not met."""


class ExecutionError(ConformanceError):
    """A test unit could not complete its HTTP exchange."""


class AuthenticationError(ConformanceError):
    """Raised by request checkers when switching users fails."""


class StatusTransitionError(ConformanceError):
    """Raised when a test unit status is changed after it became terminal."""


class DuplicateResultError(ConformanceError):
    """Raised when a result is recorded twice for the same test unit."""
