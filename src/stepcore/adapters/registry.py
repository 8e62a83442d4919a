from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from stepcore.domain.errors import Ambiguous, Undefined
from stepcore.domain.status import StepStatus
from stepcore.domain.tables import MultilineArg
from stepcore.kernel.binding import ResolvedBinding, StepDefinition
from stepcore.kernel.invocation import StepInvocation


@dataclass
class BindingRegistry:
    # Regex lookup over registered step definitions, with usage tracking.
    _definitions: list[StepDefinition] = field(default_factory=list)
    _usage: dict[str, list[str]] = field(default_factory=dict)
    _undefined: list[str] = field(default_factory=list)

    def register(self, pattern: str, action: Callable[..., object]) -> StepDefinition:
        definition = StepDefinition.compile(pattern, action)
        self.add(definition)
        return definition

    def add(self, definition: StepDefinition) -> None:
        self._definitions.append(definition)
        self._usage.setdefault(definition.pattern.pattern, [])

    def extend(self, definitions: Iterable[StepDefinition]) -> None:
        for definition in definitions:
            self.add(definition)

    def resolve(self, step_name: str) -> ResolvedBinding:
        matches: list[ResolvedBinding] = []
        for definition in self._definitions:
            found = definition.match(step_name)
            if found is not None:
                matches.append(found)
        if not matches:
            raise Undefined(step_name)
        if len(matches) > 1:
            raise Ambiguous(step_name, matches)
        return matches[0]

    def visited(self, invocation: StepInvocation) -> None:
        binding = invocation.binding
        if isinstance(binding, ResolvedBinding):
            self._usage.setdefault(binding.pattern.pattern, []).append(invocation.name)
        elif invocation.status is StepStatus.UNDEFINED and invocation.name not in self._undefined:
            self._undefined.append(invocation.name)

    def usage(self) -> dict[str, tuple[str, ...]]:
        # Definition source pattern -> step texts that used it, in visiting order.
        by_pattern = {definition.pattern.pattern: definition.source for definition in self._definitions}
        return {by_pattern.get(key, key): tuple(names) for key, names in self._usage.items()}

    def unused(self) -> list[str]:
        return [definition.source for definition in self._definitions if not self._usage.get(definition.pattern.pattern)]

    def undefined(self) -> list[str]:
        return list(self._undefined)


class Runtime:
    """StepRuntime adapter: registry lookup plus after-step hooks.

    ``call_step`` lets a step action run another step by its text. Any
    ``Undefined`` raised by the sub-step, whether its lookup failed or its
    action raised it, is re-raised as nested so it is always reported, even
    outside strict mode.
    """

    def __init__(
        self,
        registry: BindingRegistry,
        *,
        after_step_hooks: Iterable[Callable[[], None]] = (),
    ) -> None:
        self.registry = registry
        self._after_step_hooks = list(after_step_hooks)

    def resolve(self, step_name: str) -> ResolvedBinding:
        return self.registry.resolve(step_name)

    def visited(self, invocation: StepInvocation) -> None:
        self.registry.visited(invocation)

    def add_after_step(self, hook: Callable[[], None]) -> None:
        self._after_step_hooks.append(hook)

    def after_step(self) -> None:
        for hook in self._after_step_hooks:
            hook()

    def call_step(self, step_name: str, multiline_arg: MultilineArg | None = None) -> None:
        try:
            self.registry.resolve(step_name).invoke(multiline_arg)
        except Undefined as exc:
            exc.nested = True
            raise
