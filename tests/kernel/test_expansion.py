from __future__ import annotations

import pytest

from stepcore.adapters.registry import BindingRegistry, Runtime
from stepcore.adapters.visitors import RecordingVisitor
from stepcore.config.models import PlanScenario, PlanStep, RunConfig
from stepcore.domain.dialects import load_dialect
from stepcore.domain.status import StepStatus
from stepcore.domain.tables import CellRef, DocString, Table
from stepcore.kernel.expansion import InvalidPlanError, build_source, expand_scenario, substitute

EN = load_dialect("en")


def _outline() -> PlanScenario:
    return PlanScenario.model_validate(
        {
            "name": "eating",
            "steps": [
                {"keyword": "Given ", "text": "there are <start> cukes", "line": 4},
                {"keyword": "When ", "text": "I eat <eat> cukes", "line": 5},
                {"keyword": "Then ", "text": "I should have <left> cukes", "line": 6},
            ],
            "examples": [["start", "eat", "left"], [12, 5, 7], [20, 5, 14]],
        }
    )


def test_substitute_replaces_known_placeholders_only() -> None:
    # Unknown placeholders are left as written.
    text, used = substitute("<a> and <b> and <a>", {"a": "1"})
    assert text == "1 and <b> and 1"
    assert used == ["a"]


def test_build_source_attaches_table_or_doc_string() -> None:
    with_table = build_source(PlanStep(keyword="Given ", text="x", table=[["a"]]), dialect=EN)
    with_doc = build_source(PlanStep(keyword="Given ", text="x", doc_string="hi"), dialect=EN)
    assert with_table.multiline_arg == Table([["a"]])
    assert with_doc.multiline_arg == DocString("hi")


def test_plain_scenario_expands_to_one_run() -> None:
    # A scenario without examples is a single run.
    scenario = PlanScenario(name="plain", steps=[PlanStep(keyword="Given ", text="x")])
    runs = expand_scenario(scenario, dialect=EN)
    assert len(runs) == 1
    assert runs[0].background is None
    assert [invocation.name for invocation in runs[0].steps] == ["x"]


def test_scenario_without_steps_is_invalid() -> None:
    # Empty scenarios are rejected.
    with pytest.raises(InvalidPlanError):
        expand_scenario(PlanScenario(name="empty", steps=[]), dialect=EN)


def test_outline_expands_one_run_per_example_row() -> None:
    # Each example row becomes a run with matched cells.
    runs = expand_scenario(_outline(), dialect=EN, file="eat.feature")
    assert [run.name for run in runs] == ["eating (row 1)", "eating (row 2)"]
    assert [invocation.name for invocation in runs[1].steps] == [
        "there are 20 cukes",
        "I eat 5 cukes",
        "I should have 14 cukes",
    ]
    # The literal text is kept on the source step.
    assert runs[1].steps[0].source.text == "there are <start> cukes"
    assert runs[1].steps[0].matched_cells == (CellRef(row=2, column=0),)


def test_outline_cells_mirror_step_statuses() -> None:
    # Running a row writes each step's status into the cells it used.
    registry = BindingRegistry()
    registry.register(r"there are (\d+) cukes", lambda count: None)
    registry.register(r"I eat (\d+) cukes", lambda count: None)

    def _check(left: str) -> None:
        assert left == "7"

    registry.register(r"I should have (\d+) cukes", _check)
    visitor = RecordingVisitor(runtime=Runtime(registry), configuration=RunConfig())
    runs = expand_scenario(_outline(), dialect=EN)

    for run in runs:
        run.steps.accept(visitor)

    examples = runs[0].examples
    assert examples is not None
    assert examples.row_status(1) is StepStatus.PASSED
    assert examples.row_status(2) is StepStatus.FAILED
    assert examples.cell(CellRef(row=2, column=2)).status is StepStatus.FAILED
    assert examples.cell(CellRef(row=2, column=0)).status is StepStatus.PASSED


def test_outline_substitutes_multiline_arguments() -> None:
    # Placeholders in tables and doc strings are substituted.
    scenario = PlanScenario.model_validate(
        {
            "name": "tables",
            "steps": [{"keyword": "Given ", "text": "a table", "table": [["name"], ["<who>"]]}],
            "examples": [["who"], ["alice"]],
        }
    )
    run = expand_scenario(scenario, dialect=EN)[0]
    invocation = run.steps[0]
    assert invocation.multiline_arg == Table([["name"], ["alice"]])
    assert invocation.matched_cells == (CellRef(row=1, column=0),)


def test_duplicate_example_headers_are_invalid() -> None:
    scenario = PlanScenario.model_validate(
        {"name": "dup", "steps": [{"keyword": "Given ", "text": "<a>"}], "examples": [["a", "a"], ["1", "2"]]}
    )
    with pytest.raises(InvalidPlanError):
        expand_scenario(scenario, dialect=EN)


def test_every_run_gets_its_own_background() -> None:
    # Background invocations are not shared between runs.
    background = [build_source(PlanStep(keyword="Given ", text="a clean slate"), dialect=EN)]
    runs = expand_scenario(_outline(), dialect=EN, background=background)
    assert runs[0].background is not None and runs[1].background is not None
    assert runs[0].background is not runs[1].background
    assert runs[0].background[0].background is True
    assert runs[0].steps.upstream is runs[0].background
    assert runs[0].collections() == [runs[0].background, runs[0].steps]
