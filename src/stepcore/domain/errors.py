from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stepcore.domain.tables import Table
    from stepcore.kernel.binding import ResolvedBinding


class StepError(Exception):
    """Base class for conditions that classify a step outcome.

    ``backtrace`` holds report-level frames when the raiser already knows
    where the problem is (an ambiguous match points at its candidates).
    ``nested`` marks errors raised by a sub-step called from another step.
    """

    def __init__(self, message: str, *, backtrace: list[str] | None = None, nested: bool = False) -> None:
        super().__init__(message)
        self.backtrace = backtrace
        self.nested = nested


class Undefined(StepError):
    # No binding matches the step text, or a binding raised it explicitly.
    def __init__(self, step_name: str, *, nested: bool = False) -> None:
        super().__init__(f'Undefined step: "{step_name}"', nested=nested)
        self.step_name = step_name


class Ambiguous(StepError):
    # More than one binding matches; frames point at every candidate.
    def __init__(self, step_name: str, candidates: Sequence[ResolvedBinding]) -> None:
        lines = [f"  {candidate.pattern.pattern}" for candidate in candidates]
        message = f'Ambiguous match of "{step_name}":\n\n' + "\n".join(lines)
        frames = [candidate.backtrace_line for candidate in candidates if candidate.backtrace_line]
        super().__init__(message, backtrace=frames)
        self.step_name = step_name
        self.candidates = tuple(candidates)


class Pending(StepError):
    # Raised by a binding that is declared but not written yet.
    def __init__(self, message: str = "TODO") -> None:
        super().__init__(message)


class TableMismatch(StepError):
    # Structured-argument comparison failed; ``table`` is the produced comparison.
    def __init__(self, table: Table, message: str = "Tables were not identical") -> None:
        super().__init__(message)
        self.table = table


@dataclass(frozen=True, slots=True)
class CapturedError:
    # A raised condition together with the trace shown in reports.
    error: BaseException
    backtrace: tuple[str, ...] = ()

    @property
    def undefined(self) -> bool:
        return isinstance(self.error, Undefined)

    @property
    def nested(self) -> bool:
        return bool(getattr(self.error, "nested", False))

    @property
    def type_name(self) -> str:
        return type(self.error).__name__

    @property
    def message(self) -> str:
        return str(self.error)
