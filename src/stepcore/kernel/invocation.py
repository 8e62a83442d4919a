from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from stepcore.config.models import RunConfig
from stepcore.domain.dialects import Dialect
from stepcore.domain.errors import Ambiguous, CapturedError, Pending, TableMismatch, Undefined
from stepcore.domain.status import StepStatus
from stepcore.domain.tables import CellRef, MultilineArg, Table
from stepcore.kernel.backtrace import BacktraceOptions, filter_backtrace, frames_from_exception
from stepcore.kernel.binding import Binding, UnresolvedBinding
from stepcore.kernel.keywords import resolve_keyword
from stepcore.kernel.source import StepSource
from stepcore.ports.lookup import BindingLookup, StepRuntime

if TYPE_CHECKING:
    from stepcore.kernel.collection import StepCollection
    from stepcore.ports.visitor import StepVisitor


@dataclass(frozen=True, slots=True)
class StepResult:
    # Everything a report needs about one finished step.
    keyword: str
    name: str
    binding: Binding | None
    multiline_arg: MultilineArg | None
    status: StepStatus
    exception: CapturedError | None
    source_indent: int
    background: bool
    file_colon_line: str | None


class StepInvocation:
    """Runtime occurrence of one source step.

    Owns the step's status, its binding and any captured error. Lookup and
    invocation errors are recorded here and never propagate to the caller;
    callers observe the outcome through ``status`` and ``reported_exception``.

    ``matched_cells`` are references into ``cells_table`` (the examples table
    of a scenario outline). Every status change is written to those cells too.
    """

    def __init__(
        self,
        step: StepSource,
        name: str | None = None,
        multiline_arg: MultilineArg | None = None,
        *,
        cells_table: Table | None = None,
        matched_cells: Iterable[CellRef] = (),
    ) -> None:
        self._step = step
        self.name = step.text if name is None else name
        self.multiline_arg = step.multiline_arg if multiline_arg is None else multiline_arg
        self.matched_cells: tuple[CellRef, ...] = tuple(matched_cells)
        if self.matched_cells and cells_table is None:
            raise ValueError("matched_cells require the table that owns them")
        self._cells_table = cells_table
        self._collection: StepCollection | None = None
        self._skip_invoke = False
        self.background = False
        self.binding: Binding | None = None
        self.exception: CapturedError | None = None
        self.reported_exception: CapturedError | None = None
        self.different_table: Table | None = None
        self._status = StepStatus.SKIPPED
        self.set_status(StepStatus.SKIPPED)

    def __repr__(self) -> str:
        return f"StepInvocation({self.keyword}{self.name!r}, status={self._status.value})"

    # ---- state ----

    @property
    def status(self) -> StepStatus:
        return self._status

    @property
    def invoked(self) -> bool:
        return self._skip_invoke

    def set_status(self, status: StepStatus) -> None:
        if status is StepStatus.SKIPPED and self._skip_invoke and self._status is not StepStatus.SKIPPED:
            raise ValueError("A step cannot return to skipped once it has run")
        self._status = status
        if self._cells_table is not None:
            self._cells_table.set_status(self.matched_cells, status)

    def attach(self, collection: StepCollection, *, background: bool = False) -> None:
        # Called by the owning collection when it adopts this invocation.
        self._collection = collection
        self.background = background

    def skip_invoke(self) -> None:
        self._skip_invoke = True

    # ---- lifecycle ----

    def accept(self, visitor: StepVisitor) -> None:
        visitor.visit_step(self)
        self.invoke(visitor.runtime, visitor.configuration)
        visitor.visit_step_result(self.result())

    def find_binding(self, lookup: BindingLookup, config: RunConfig) -> None:
        if self.binding is not None:
            return
        try:
            self.binding = lookup.resolve(self.name)
        except Undefined as exc:
            self.record_failure(exc, config, clear_backtrace=True)
            self.set_status(StepStatus.UNDEFINED)
            self.binding = UnresolvedBinding(self.name)
        except Ambiguous as exc:
            # The candidate frames are the diagnosis; keep them as raised.
            self.record_failure(exc, config, clear_backtrace=False, preserve_backtrace=True)
            self.set_status(StepStatus.FAILED)
            self.binding = UnresolvedBinding(self.name)
        lookup.visited(self)

    def invoke(self, runtime: StepRuntime, config: RunConfig) -> None:
        self.find_binding(runtime, config)
        if self._skip_invoke or config.dry_run or self.exception is not None:
            return
        if config.fail_fast and self._collection is not None and self._collection.exception is not None:
            return
        assert self.binding is not None
        self._skip_invoke = True
        try:
            self.binding.invoke(self.multiline_arg)
            runtime.after_step()
            self.set_status(StepStatus.PASSED)
        except Pending as exc:
            self.record_failure(exc, config, clear_backtrace=True)
            self.set_status(StepStatus.PENDING)
        except Undefined as exc:
            self.record_failure(exc, config, clear_backtrace=True)
            self.set_status(StepStatus.UNDEFINED)
        except TableMismatch as exc:
            self.different_table = exc.table
            self.record_failure(exc, config, clear_backtrace=True)
            self.set_status(StepStatus.FAILED)
        except Exception as exc:  # noqa: BLE001 - every step failure is recorded, never raised
            self.record_failure(exc, config, clear_backtrace=True)
            self.set_status(StepStatus.FAILED)

    def record_failure(
        self,
        error: BaseException,
        config: RunConfig,
        *,
        clear_backtrace: bool,
        preserve_backtrace: bool = False,
    ) -> None:
        frames = None if clear_backtrace else frames_from_exception(error)
        backtrace = [] if frames is None else frames
        if self._step.backtrace_line is not None:
            backtrace.append(self._step.backtrace_line)
        if not preserve_backtrace:
            backtrace = filter_backtrace(backtrace, BacktraceOptions.from_config(config))
        captured = CapturedError(error=error, backtrace=tuple(backtrace))
        self.exception = captured
        # Plain undefined steps are a category of their own unless strict mode asks otherwise.
        if config.strict or not captured.undefined or captured.nested:
            self.reported_exception = captured
        else:
            self.reported_exception = None

    # ---- reporting ----

    def result(self) -> StepResult:
        return StepResult(
            keyword=self.actual_keyword,
            name=self.name,
            binding=self.binding,
            multiline_arg=self.different_table if self.different_table is not None else self.multiline_arg,
            status=self._status,
            exception=self.reported_exception,
            source_indent=self.source_indent,
            background=self.background,
            file_colon_line=self.file_colon_line,
        )

    @property
    def previous(self) -> StepInvocation | None:
        if self._collection is None:
            return None
        return self._collection.previous_step(self)

    @property
    def actual_keyword(self) -> str:
        return resolve_keyword(self, self.language)

    @property
    def keyword(self) -> str:
        return self._step.keyword

    @property
    def language(self) -> Dialect:
        if self._step.language is None:
            raise ValueError(f"Language is required on step {self._step.keyword}{self._step.text!r}")
        return self._step.language

    @property
    def text_length(self) -> int:
        return self._step.text_length(self.name)

    @property
    def source_indent(self) -> int:
        if self._collection is None:
            return 0
        return self._collection.max_line_length() - self.text_length

    @property
    def file_colon_line(self) -> str | None:
        return self._step.file_colon_line

    @property
    def backtrace_line(self) -> str | None:
        return self._step.backtrace_line

    @property
    def dom_id(self) -> str:
        return self._step.dom_id

    @property
    def source(self) -> StepSource:
        return self._step

    def to_tuple(self) -> tuple[object, ...]:
        parts: list[object] = ["step_invocation", self._step.line, self.keyword, self.name]
        if self.multiline_arg is not None:
            parts.append(self.multiline_arg.to_tuple())
        return tuple(part for part in parts if part is not None)
