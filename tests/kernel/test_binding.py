from __future__ import annotations

from types import ModuleType

import pytest

from stepcore.domain.errors import Undefined
from stepcore.domain.tables import DocString
from stepcore.kernel.binding import (
    BindingDiscoveryError,
    BindingMeta,
    StepDefinition,
    UnresolvedBinding,
    discover_bindings,
    step_definition,
)


def _module(name: str, **values: object) -> ModuleType:
    module = ModuleType(name)
    for key, value in values.items():
        setattr(module, key, value)
    return module


def test_step_definition_attaches_meta_and_returns_function() -> None:
    # The decorator returns the function unchanged.
    def given_cukes(count: str) -> None:
        return None

    decorated = step_definition(r"I have (\d+) cukes")(given_cukes)
    assert decorated is given_cukes
    assert decorated.__binding_meta__ == BindingMeta(pattern=r"I have (\d+) cukes")


def test_binding_meta_requires_pattern() -> None:
    with pytest.raises(ValueError):
        BindingMeta(pattern="")


def test_definitions_match_whole_step_text() -> None:
    # Partial matches are not matches.
    definition = StepDefinition.compile(r"I have (\d+) cukes", lambda count: None)
    assert definition.match("I have 3 cukes in my belly") is None
    found = definition.match("I have 3 cukes")
    assert found is not None
    assert found.args == ("3",)
    assert definition.source == r"I have (\d+) cukes"


def test_resolved_binding_passes_groups_then_multiline_arg() -> None:
    # Capture groups come first, then the multiline argument.
    seen: list[object] = []
    definition = StepDefinition.compile(r"(\w+) says (\w+)", lambda who, what, *rest: seen.extend([who, what, *rest]))
    binding = definition.match("alice says hi")
    assert binding is not None

    binding.invoke(None)
    binding.invoke(DocString("text"))

    assert seen == ["alice", "hi", "alice", "hi", DocString("text")]


def test_format_args_brackets_matched_groups() -> None:
    # Each matched group is wrapped in the format.
    definition = StepDefinition.compile(r"I have (\d+) (\w+)(?: today)?( again)?", lambda *args: None)
    binding = definition.match("I have 3 cukes")
    assert binding is not None
    assert binding.format_args() == "I have [3] [cukes]"
    assert binding.format_args("<{}>") == "I have <3> <cukes>"


def test_resolved_binding_knows_its_source_location() -> None:
    # The location points at the action's definition.
    def action() -> None:
        return None

    binding = StepDefinition.compile("anything", action).match("anything")
    assert binding is not None
    assert binding.file_colon_line is not None
    assert binding.file_colon_line.startswith(__file__)
    assert binding.backtrace_line is not None
    assert binding.backtrace_line.endswith("in `^(?:anything)$`")


def test_unresolved_binding_raises_undefined_when_invoked() -> None:
    # The sentinel raises Undefined if invoked.
    binding = UnresolvedBinding("nothing matches")
    assert binding.file_colon_line is None
    assert binding.format_args() == "nothing matches"
    with pytest.raises(Undefined):
        binding.invoke(None)


def test_discover_bindings_collects_decorated_functions() -> None:
    # Only decorated functions are collected, in definition order.
    @step_definition("first")
    def first() -> None:
        return None

    @step_definition("second")
    def second() -> None:
        return None

    def helper() -> None:
        return None

    found = discover_bindings([_module("steps_a", first=first, helper=helper), _module("steps_b", second=second)])
    assert [definition.source for definition in found] == ["first", "second"]
    assert found[0].action is first


def test_discover_bindings_rejects_duplicate_patterns() -> None:
    # Duplicate patterns across modules fail fast.
    @step_definition("same")
    def one() -> None:
        return None

    @step_definition("same")
    def two() -> None:
        return None

    with pytest.raises(BindingDiscoveryError):
        discover_bindings([_module("steps_a", one=one), _module("steps_b", two=two)])
