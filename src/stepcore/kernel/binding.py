from __future__ import annotations

import inspect
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from types import ModuleType
from typing import TypeVar

from stepcore.domain.errors import Undefined
from stepcore.domain.tables import MultilineArg

F = TypeVar("F", bound=Callable[..., object])


class BindingDiscoveryError(RuntimeError):
    # Raised when discovery finds duplicate or invalid step definitions.
    pass


@dataclass(frozen=True, slots=True)
class BindingMeta:
    # Metadata attached to a step definition function by @step_definition.
    pattern: str

    def __post_init__(self) -> None:
        if not self.pattern:
            raise ValueError("BindingMeta.pattern must be a non-empty string")


def step_definition(pattern: str) -> Callable[[F], F]:
    # Decorator attaches BindingMeta for discovery; the function itself is unchanged.
    meta = BindingMeta(pattern=pattern)

    def _decorate(target: F) -> F:
        setattr(target, "__binding_meta__", meta)
        return target

    return _decorate


def _source_location(action: Callable[..., object]) -> str | None:
    try:
        filename = inspect.getsourcefile(action)
        _, line = inspect.getsourcelines(action)
    except (OSError, TypeError):
        return None
    if filename is None:
        return None
    return f"{filename}:{line}"


@dataclass(frozen=True, slots=True)
class ResolvedBinding:
    # A step definition matched against concrete step text.
    action: Callable[..., object]
    pattern: re.Pattern[str]
    step_name: str
    args: tuple[str | None, ...] = ()
    spans: tuple[tuple[int, int], ...] = ()

    def invoke(self, multiline_arg: MultilineArg | None) -> None:
        # Capture groups first, then the multiline argument when one is attached.
        args: list[object] = list(self.args)
        if multiline_arg is not None:
            args.append(multiline_arg)
        self.action(*args)

    @property
    def file_colon_line(self) -> str | None:
        return _source_location(self.action)

    @property
    def backtrace_line(self) -> str | None:
        location = self.file_colon_line
        if location is None:
            return None
        return f"{location}: in `{self.pattern.pattern}`"

    def format_args(self, fmt: str = "[{}]") -> str:
        # Step text with every matched group wrapped by fmt.
        text = self.step_name
        for start, end in sorted(self.spans, reverse=True):
            if start < 0:
                continue
            text = text[:start] + fmt.format(text[start:end]) + text[end:]
        return text


@dataclass(frozen=True, slots=True)
class UnresolvedBinding:
    # Sentinel stored once lookup has failed, so later lookups are no-ops.
    step_name: str

    def invoke(self, multiline_arg: MultilineArg | None) -> None:
        # Status already routes around this; invoking it means the caller skipped lookup.
        raise Undefined(self.step_name)

    @property
    def file_colon_line(self) -> str | None:
        return None

    @property
    def backtrace_line(self) -> str | None:
        return None

    def format_args(self, fmt: str = "[{}]") -> str:
        return self.step_name


Binding = ResolvedBinding | UnresolvedBinding


@dataclass(frozen=True, slots=True)
class StepDefinition:
    # A registered pattern and the action it runs.
    pattern: re.Pattern[str]
    action: Callable[..., object]

    @classmethod
    def compile(cls, pattern: str, action: Callable[..., object]) -> StepDefinition:
        # Patterns are anchored so "I have 3 cukes" never matches "I have 3 cukes in my belly".
        return cls(pattern=re.compile(rf"^(?:{pattern})$"), action=action)

    @property
    def source(self) -> str:
        return self.pattern.pattern[4:-2]

    def match(self, step_name: str) -> ResolvedBinding | None:
        found = self.pattern.match(step_name)
        if found is None:
            return None
        spans = tuple(found.span(index) for index in range(1, (found.re.groups or 0) + 1))
        return ResolvedBinding(
            action=self.action,
            pattern=self.pattern,
            step_name=step_name,
            args=found.groups(),
            spans=spans,
        )


def discover_bindings(modules: Iterable[ModuleType]) -> list[StepDefinition]:
    # Collect @step_definition functions from modules in definition order.
    found: list[StepDefinition] = []
    seen: dict[str, str] = {}
    for module in modules:
        for value in list(module.__dict__.values()):
            meta = getattr(value, "__binding_meta__", None)
            if not isinstance(meta, BindingMeta):
                continue
            if not callable(value):
                raise BindingDiscoveryError(f"Step definition '{meta.pattern}' is not callable")
            if meta.pattern in seen:
                raise BindingDiscoveryError(
                    f"Duplicate step definition '{meta.pattern}' in {module.__name__} and {seen[meta.pattern]}"
                )
            seen[meta.pattern] = module.__name__
            found.append(StepDefinition.compile(meta.pattern, value))
    return found
