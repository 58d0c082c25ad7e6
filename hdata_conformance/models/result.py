"""Models for test unit statuses and results."""

from dataclasses import dataclass
from typing import Literal, get_args

type TerminalStatus = Literal["success", "failed", "skipped", "error"]
type Status = Literal["not_run", "success", "failed", "skipped", "error"]

TERMINAL_STATUSES: tuple[TerminalStatus, ...] = get_args(TerminalStatus.__value__)


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Terminal result of a single test unit.

    Written once by the runner and never modified afterwards.
    """

    __test__ = False

    test_id: str
    name: str
    status: TerminalStatus
    required: bool = True
    message: str | None = None
    duration: float = 0.0
