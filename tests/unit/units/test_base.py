"""Tests for TestUnit base class."""

import pytest

from hdata_conformance.errors import (
    AssertionFailure,
    SkippedPrecondition,
    StatusTransitionError,
)
from hdata_conformance.testing.factories import TestResultFactory
from hdata_conformance.testing.units import stub_unit
from hdata_conformance.units.base import Dependency, Prerequisites


class TestSetStatus:
    """Tests for the status lifecycle."""

    def test_starts_not_run(self) -> None:
        """New units have not run."""
        unit = stub_unit("1")()

        assert unit.status == "not_run"
        assert unit.message is None

    def test_transitions_once(self) -> None:
        """A terminal status can be set exactly once."""
        unit = stub_unit("1")()
        unit.set_status("failed", "wrong status")

        with pytest.raises(StatusTransitionError):
            unit.set_status("success")

        assert unit.status == "failed"
        assert unit.message == "wrong status"

    def test_cannot_reset(self) -> None:
        """Setting not_run is rejected."""
        unit = stub_unit("1")()

        with pytest.raises(StatusTransitionError):
            unit.set_status("not_run")


def test_declared_dependencies_are_normalized() -> None:
    """Plain classes become required dependencies, order is kept."""
    first = stub_unit("1")
    second = stub_unit("2")
    unit_cls = stub_unit("3", dependencies=[second, Dependency(first, advisory=True)])

    assert unit_cls.declared_dependencies() == (
        Dependency(second),
        Dependency(first, advisory=True),
    )


def test_assert_equals() -> None:
    """Mismatches raise AssertionFailure with both values."""
    unit = stub_unit("1")()

    unit.assert_equals(405, 405, "status")
    with pytest.raises(AssertionFailure, match="status: expected 405 but was 200"):
        unit.assert_equals(405, 200, "status")


def test_skip() -> None:
    """skip raises SkippedPrecondition."""
    unit = stub_unit("1")()

    with pytest.raises(SkippedPrecondition, match="document.file"):
        unit.skip("document.file missing")


class TestPrerequisites:
    """Tests for Prerequisites view."""

    def test_get_returns_instance(self) -> None:
        """Returns the executed instance of a prerequisite."""
        unit_cls = stub_unit("1")
        unit = unit_cls()
        unit.set_status("success")
        prerequisites = Prerequisites({"1": unit})

        assert prerequisites.get(unit_cls) is unit
        assert prerequisites.status(unit_cls) == "success"
        assert unit_cls in prerequisites

    def test_get_unknown_raises(self) -> None:
        """Undeclared prerequisites are not available."""
        prerequisites = Prerequisites({})

        with pytest.raises(KeyError):
            prerequisites.get(stub_unit("1"))
        assert stub_unit("1") not in prerequisites

    def test_get_checks_type(self) -> None:
        """The registered unit must be an instance of the requested class."""
        prerequisites = Prerequisites({"1": stub_unit("1")()})

        with pytest.raises(TypeError):
            prerequisites.get(stub_unit("1"))

    def test_status_prefers_recorded_result(self) -> None:
        """The recorded result wins over the status the unit set itself."""
        unit_cls = stub_unit("1")
        unit = unit_cls()
        unit.set_status("success")
        recorded = TestResultFactory.build(test_id="1", status="error")
        prerequisites = Prerequisites({"1": unit}, {"1": recorded})

        assert prerequisites.status(unit_cls) == "error"
