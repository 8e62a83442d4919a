from __future__ import annotations

from collections.abc import Iterable
from enum import Enum


# Outcome of one step invocation; values are what reports render.
class StepStatus(str, Enum):
    PASSED = "passed"
    UNDEFINED = "undefined"
    PENDING = "pending"
    SKIPPED = "skipped"
    FAILED = "failed"


# Best to worst. An undefined step ranks below a step that was never reached,
# and both rank below an explicit failure.
SEVERITY: tuple[StepStatus, ...] = (
    StepStatus.PASSED,
    StepStatus.UNDEFINED,
    StepStatus.PENDING,
    StepStatus.SKIPPED,
    StepStatus.FAILED,
)


def severity(status: StepStatus | str) -> int:
    # Plain strings are accepted so YAML/JSON values can be ranked directly.
    return SEVERITY.index(StepStatus(status))


def worst_status(statuses: Iterable[StepStatus | str]) -> StepStatus:
    ranks = [severity(status) for status in statuses]
    if not ranks:
        raise ValueError("worst_status requires at least one status")
    return SEVERITY[max(ranks)]
