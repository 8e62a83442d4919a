from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from stepcore.config.models import PlanScenario, PlanStep
from stepcore.domain.dialects import Dialect
from stepcore.domain.tables import CellRef, DocString, MultilineArg, Table
from stepcore.kernel.collection import StepCollection
from stepcore.kernel.invocation import StepInvocation
from stepcore.kernel.source import StepSource

_PLACEHOLDER = re.compile(r"<([^<>]+)>")


class InvalidPlanError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class ScenarioRun:
    # One concrete run: a scenario, or one examples row of an outline.
    name: str
    steps: StepCollection
    background: StepCollection | None = None
    examples: Table | None = None
    row: int | None = None

    def collections(self) -> list[StepCollection]:
        return [self.background, self.steps] if self.background is not None else [self.steps]


def build_source(step: PlanStep, *, dialect: Dialect, file: str = "") -> StepSource:
    multiline_arg: MultilineArg | None = None
    if step.table is not None:
        multiline_arg = Table(step.table)
    elif step.doc_string is not None:
        multiline_arg = DocString(step.doc_string)
    return StepSource(
        keyword=step.keyword,
        text=step.text,
        file=file,
        line=step.line,
        language=dialect,
        multiline_arg=multiline_arg,
    )


def substitute(text: str, values: Mapping[str, str]) -> tuple[str, list[str]]:
    # Replace <name> placeholders; returns the new text and the names actually used.
    used: list[str] = []

    def _replace(found: re.Match[str]) -> str:
        key = found.group(1)
        if key not in values:
            return found.group(0)
        if key not in used:
            used.append(key)
        return values[key]

    return _PLACEHOLDER.sub(_replace, text), used


def _substitute_arg(arg: MultilineArg | None, values: Mapping[str, str], used: list[str]) -> MultilineArg | None:
    if arg is None:
        return None

    def _apply(text: str) -> str:
        replaced, names = substitute(text, values)
        used.extend(name for name in names if name not in used)
        return replaced

    return arg.map_values(_apply)


def _background(sources: Sequence[StepSource]) -> StepCollection | None:
    # Each run gets its own background invocations; a background runs before every scenario.
    if not sources:
        return None
    return StepCollection([StepInvocation(source) for source in sources], background=True)


def expand_scenario(
    scenario: PlanScenario,
    *,
    dialect: Dialect,
    background: Sequence[StepSource] = (),
    file: str = "",
) -> list[ScenarioRun]:
    if not scenario.steps:
        raise InvalidPlanError(f"Scenario '{scenario.name}' has no steps")
    sources = [build_source(step, dialect=dialect, file=file) for step in scenario.steps]

    if scenario.examples is None:
        upstream = _background(background)
        steps = StepCollection([StepInvocation(source) for source in sources], upstream=upstream)
        return [ScenarioRun(name=scenario.name, steps=steps, background=upstream)]

    examples = Table(scenario.examples)
    headers = examples.headers
    if len(set(headers)) != len(headers):
        raise InvalidPlanError(f"Scenario '{scenario.name}' examples have duplicate headers")

    runs: list[ScenarioRun] = []
    for row, values in enumerate(examples.hashes(), start=1):
        invocations: list[StepInvocation] = []
        for source in sources:
            name, used = substitute(source.text, values)
            arg = _substitute_arg(source.multiline_arg, values, used)
            cells = [CellRef(row=row, column=headers.index(header)) for header in used]
            invocations.append(
                StepInvocation(source, name, arg, cells_table=examples, matched_cells=cells)
            )
        upstream = _background(background)
        runs.append(
            ScenarioRun(
                name=f"{scenario.name} (row {row})",
                steps=StepCollection(invocations, upstream=upstream),
                background=upstream,
                examples=examples,
                row=row,
            )
        )
    return runs
