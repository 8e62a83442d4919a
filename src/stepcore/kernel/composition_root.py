from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from types import ModuleType

from stepcore.adapters.registry import BindingRegistry, Runtime
from stepcore.adapters.visitors import RecordingVisitor
from stepcore.config.models import PlanConfig, RunConfig
from stepcore.domain.dialects import load_dialect
from stepcore.domain.logging import LogMessage
from stepcore.domain.status import StepStatus
from stepcore.kernel.binding import discover_bindings
from stepcore.kernel.expansion import ScenarioRun, build_source, expand_scenario
from stepcore.ports.log_sink import LogSink


@dataclass(frozen=True, slots=True)
class Suite:
    # Everything needed to run a plan: expanded runs plus the runtime they share.
    runs: tuple[ScenarioRun, ...]
    runtime: Runtime
    config: RunConfig


def build_suite(
    *,
    config: RunConfig,
    plan: PlanConfig,
    modules: Iterable[ModuleType] = (),
    registry: BindingRegistry | None = None,
    plan_file: str = "",
) -> Suite:
    # Composition root wires dialect, discovered bindings and expanded scenarios.
    dialect = load_dialect(plan.language or config.language)
    registry = registry if registry is not None else BindingRegistry()
    registry.extend(discover_bindings(modules))
    background = [build_source(step, dialect=dialect, file=plan_file) for step in plan.background]

    runs: list[ScenarioRun] = []
    for scenario in plan.scenarios:
        runs.extend(expand_scenario(scenario, dialect=dialect, background=background, file=plan_file))
    return Suite(runs=tuple(runs), runtime=Runtime(registry), config=config)


def run_suite(suite: Suite, *, log_sink: LogSink | None = None) -> RecordingVisitor:
    visitor = RecordingVisitor(runtime=suite.runtime, configuration=suite.config, log_sink=log_sink)
    for run in suite.runs:
        for collection in run.collections():
            collection.accept(visitor)
        if log_sink is not None:
            log_sink.emit(
                LogMessage(
                    level="error" if run.steps.failed else "info",
                    message="scenario finished",
                    fields={"scenario": run.name, "status": run.steps.status.value},
                )
            )
    if log_sink is not None:
        log_sink.emit(
            LogMessage(
                level="info",
                message="run finished",
                fields={"summary": visitor.summary(), "unused": suite.runtime.registry.unused()},
            )
        )
    return visitor


def exit_code(status: StepStatus, *, strict: bool) -> int:
    # Strict runs fail on anything short of passed; otherwise only failures fail the run.
    if status is StepStatus.FAILED:
        return 1
    if strict and status is not StepStatus.PASSED:
        return 1
    return 0
