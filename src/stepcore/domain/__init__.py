from .dialects import BULLET, Dialect, UnknownDialectError, available_dialects, load_dialect
from .errors import Ambiguous, CapturedError, Pending, StepError, TableMismatch, Undefined
from .logging import LEVELS, LogMessage, level_enabled
from .status import SEVERITY, StepStatus, severity, worst_status
from .tables import Cell, CellRef, DocString, MultilineArg, Table

# Public domain exports keep imports explicit across layers.
__all__ = [
    "BULLET",
    "LEVELS",
    "SEVERITY",
    "Ambiguous",
    "CapturedError",
    "Cell",
    "CellRef",
    "Dialect",
    "DocString",
    "LogMessage",
    "MultilineArg",
    "Pending",
    "StepError",
    "StepStatus",
    "Table",
    "TableMismatch",
    "Undefined",
    "UnknownDialectError",
    "available_dialects",
    "level_enabled",
    "load_dialect",
    "severity",
    "worst_status",
]
