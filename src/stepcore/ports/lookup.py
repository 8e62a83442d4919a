from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from stepcore.kernel.binding import Binding
    from stepcore.kernel.invocation import StepInvocation


# BindingLookup resolves step text to an implementation; matching itself is adapter territory.
@runtime_checkable
class BindingLookup(Protocol):
    def resolve(self, step_name: str) -> Binding:
        """Return the single binding for step_name; raise Undefined or Ambiguous otherwise."""
        raise NotImplementedError("BindingLookup is a port; use a concrete adapter.")

    def visited(self, invocation: StepInvocation) -> None:
        """Record that invocation went through lookup, whatever the outcome."""
        raise NotImplementedError("BindingLookup is a port; use a concrete adapter.")


@runtime_checkable
class StepRuntime(BindingLookup, Protocol):
    def after_step(self) -> None:
        """Run hooks after a step action returned normally."""
        raise NotImplementedError("StepRuntime is a port; use a concrete adapter.")
