from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from stepcore.config.models import RunConfig
    from stepcore.kernel.invocation import StepInvocation, StepResult
    from stepcore.ports.lookup import StepRuntime


# StepVisitor drives invocations and receives their finalized results.
@runtime_checkable
class StepVisitor(Protocol):
    runtime: StepRuntime
    configuration: RunConfig

    def visit_step(self, invocation: StepInvocation) -> None:
        """Called before the invocation runs."""
        raise NotImplementedError("StepVisitor is a port; use a concrete adapter.")

    def visit_step_result(self, result: StepResult) -> None:
        """Consume the finalized outcome of one step."""
        raise NotImplementedError("StepVisitor is a port; use a concrete adapter.")
