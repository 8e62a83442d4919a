from __future__ import annotations

from collections.abc import Iterable, Iterator

from stepcore.domain.errors import CapturedError
from stepcore.domain.status import StepStatus, worst_status
from stepcore.kernel.invocation import StepInvocation
from stepcore.ports.visitor import StepVisitor


class StepCollection:
    """Ordered steps of one scenario, outline row or background.

    ``exception`` is the run-level error every member checks before running:
    the first error captured by a member, or else the error of the upstream
    collection (a scenario's background). Only members change it, by failing.
    """

    def __init__(
        self,
        invocations: Iterable[StepInvocation],
        *,
        background: bool = False,
        upstream: StepCollection | None = None,
    ) -> None:
        self._steps = list(invocations)
        self.background = background
        self.upstream = upstream
        for invocation in self._steps:
            invocation.attach(self, background=background)

    def __iter__(self) -> Iterator[StepInvocation]:
        return iter(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def __getitem__(self, index: int) -> StepInvocation:
        return self._steps[index]

    def previous_step(self, invocation: StepInvocation) -> StepInvocation | None:
        # Identity lookup: two invocations of the same text are still distinct steps.
        for index, candidate in enumerate(self._steps):
            if candidate is invocation:
                return self._steps[index - 1] if index > 0 else None
        raise ValueError(f"{invocation!r} does not belong to this collection")

    @property
    def exception(self) -> CapturedError | None:
        for invocation in self._steps:
            if invocation.exception is not None:
                return invocation.exception
        return self.upstream.exception if self.upstream is not None else None

    @property
    def failed(self) -> bool:
        return any(invocation.status is StepStatus.FAILED for invocation in self._steps)

    @property
    def status(self) -> StepStatus:
        # An empty collection has nothing that could have gone wrong.
        if not self._steps:
            return StepStatus.PASSED
        return worst_status(invocation.status for invocation in self._steps)

    def max_line_length(self) -> int:
        return max((invocation.text_length for invocation in self._steps), default=0)

    def skip_invoke(self) -> None:
        for invocation in self._steps:
            invocation.skip_invoke()

    def accept(self, visitor: StepVisitor) -> None:
        for invocation in self._steps:
            invocation.accept(visitor)
