from stepcore.domain import Ambiguous, Pending, StepStatus, Table, TableMismatch, Undefined, worst_status
from stepcore.kernel import StepCollection, StepInvocation, StepResult, StepSource, step_definition

# Top-level exports cover what step definition modules and embedders need.
__all__ = [
    "Ambiguous",
    "Pending",
    "StepCollection",
    "StepInvocation",
    "StepResult",
    "StepSource",
    "StepStatus",
    "Table",
    "TableMismatch",
    "Undefined",
    "step_definition",
    "worst_status",
]
