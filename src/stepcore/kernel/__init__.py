from .backtrace import BacktraceOptions, filter_backtrace, frames_from_exception
from .binding import (
    Binding,
    BindingDiscoveryError,
    ResolvedBinding,
    StepDefinition,
    UnresolvedBinding,
    discover_bindings,
    step_definition,
)
from .collection import StepCollection
from .invocation import StepInvocation, StepResult
from .keywords import Keywords, resolve_keyword
from .source import StepSource

# Kernel exports are minimal and runtime-focused.
__all__ = [
    "BacktraceOptions",
    "Binding",
    "BindingDiscoveryError",
    "Keywords",
    "ResolvedBinding",
    "StepCollection",
    "StepDefinition",
    "StepInvocation",
    "StepResult",
    "StepSource",
    "UnresolvedBinding",
    "discover_bindings",
    "filter_backtrace",
    "frames_from_exception",
    "resolve_keyword",
    "step_definition",
]
