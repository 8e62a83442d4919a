from .log_sink import LogSink
from .lookup import BindingLookup, StepRuntime
from .visitor import StepVisitor

# Public port exports keep wiring explicit at composition time.
__all__ = ["BindingLookup", "LogSink", "StepRuntime", "StepVisitor"]
