from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from stepcore.domain.status import StepStatus, worst_status


@dataclass(slots=True)
class Cell:
    # A table cell; status stays None until a step invocation claims the cell.
    value: str
    status: StepStatus | None = None


@dataclass(frozen=True, slots=True)
class CellRef:
    # Non-owning reference to a cell of a Table (row 0 is the header row).
    row: int
    column: int


class Table:
    # Rectangular tabular multiline argument; also the owner of outline example cells.
    def __init__(self, rows: Iterable[Iterable[object]]) -> None:
        self._rows = [[Cell(str(value)) for value in row] for row in rows]
        widths = {len(row) for row in self._rows}
        if len(widths) > 1:
            raise ValueError(f"Table rows must have the same width, got {sorted(widths)}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Table):
            return NotImplemented
        return self.raw == other.raw

    def __repr__(self) -> str:
        return f"Table({self.raw!r})"

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def raw(self) -> list[list[str]]:
        return [[cell.value for cell in row] for row in self._rows]

    @property
    def headers(self) -> list[str]:
        return [cell.value for cell in self._rows[0]] if self._rows else []

    def hashes(self) -> list[dict[str, str]]:
        # Rows after the header, keyed by header.
        headers = self.headers
        return [dict(zip(headers, (cell.value for cell in row))) for row in self._rows[1:]]

    def cell(self, ref: CellRef) -> Cell:
        return self._rows[ref.row][ref.column]

    def set_status(self, refs: Iterable[CellRef], status: StepStatus) -> None:
        for ref in refs:
            self.cell(ref).status = status

    def row_status(self, row: int) -> StepStatus | None:
        # Worst status among the claimed cells of a row; None when no cell was claimed.
        statuses = [cell.status for cell in self._rows[row] if cell.status is not None]
        return worst_status(statuses) if statuses else None

    def map_values(self, fn: Callable[[str], str]) -> Table:
        return Table([[fn(cell.value) for cell in row] for row in self._rows])

    def to_tuple(self) -> tuple[object, ...]:
        return ("table", *(tuple(cell.value for cell in row) for row in self._rows))


@dataclass(frozen=True, slots=True)
class DocString:
    # Block-text multiline argument.
    content: str
    content_type: str = ""

    def map_values(self, fn: Callable[[str], str]) -> DocString:
        return DocString(content=fn(self.content), content_type=self.content_type)

    def to_tuple(self) -> tuple[object, ...]:
        return ("doc_string", self.content_type, self.content)


MultilineArg = Table | DocString
