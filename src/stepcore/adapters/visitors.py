from __future__ import annotations

from collections import Counter

from stepcore.config.models import RunConfig
from stepcore.domain.logging import LogMessage
from stepcore.domain.status import SEVERITY, StepStatus, worst_status
from stepcore.kernel.invocation import StepInvocation, StepResult
from stepcore.ports.log_sink import LogSink
from stepcore.ports.lookup import StepRuntime

_LEVEL_BY_STATUS = {
    StepStatus.PASSED: "info",
    StepStatus.UNDEFINED: "warning",
    StepStatus.PENDING: "warning",
    StepStatus.SKIPPED: "warning",
    StepStatus.FAILED: "error",
}


class RecordingVisitor:
    # Runs steps, keeps their results in order and logs one message per step.
    def __init__(
        self,
        *,
        runtime: StepRuntime,
        configuration: RunConfig,
        log_sink: LogSink | None = None,
    ) -> None:
        self.runtime = runtime
        self.configuration = configuration
        self.results: list[StepResult] = []
        self._log_sink = log_sink

    def visit_step(self, invocation: StepInvocation) -> None:
        self._log("debug", "step started", {"step": invocation.name, "line": invocation.file_colon_line})

    def visit_step_result(self, result: StepResult) -> None:
        self.results.append(result)
        fields: dict[str, object] = {
            "keyword": result.keyword.strip(),
            "step": result.name,
            "status": result.status.value,
            "background": result.background,
            "location": result.file_colon_line,
        }
        if result.exception is not None:
            fields["error"] = result.exception.type_name
            fields["message"] = result.exception.message
            fields["backtrace"] = list(result.exception.backtrace)
        self._log(_LEVEL_BY_STATUS[result.status], "step finished", fields)

    @property
    def status(self) -> StepStatus:
        if not self.results:
            return StepStatus.PASSED
        return worst_status(result.status for result in self.results)

    def counts(self) -> dict[StepStatus, int]:
        # Ordered worst first, zero counts omitted.
        counter = Counter(result.status for result in self.results)
        return {status: counter[status] for status in reversed(SEVERITY) if counter[status]}

    def summary(self) -> str:
        total = len(self.results)
        noun = "step" if total == 1 else "steps"
        parts = ", ".join(f"{count} {status.value}" for status, count in self.counts().items())
        return f"{total} {noun} ({parts})" if parts else f"{total} {noun}"

    def _log(self, level: str, message: str, fields: dict[str, object]) -> None:
        if self._log_sink is not None:
            self._log_sink.emit(LogMessage(level=level, message=message, fields=fields))
