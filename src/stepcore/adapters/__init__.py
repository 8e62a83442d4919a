from .log_sinks import JsonlLogSink, LevelFilterSink, MemoryLogSink, StdoutLogSink, build_log_sink
from .registry import BindingRegistry, Runtime
from .visitors import RecordingVisitor

# Adapter exports are used by the composition root and tests.
__all__ = [
    "BindingRegistry",
    "JsonlLogSink",
    "LevelFilterSink",
    "MemoryLogSink",
    "RecordingVisitor",
    "Runtime",
    "StdoutLogSink",
    "build_log_sink",
]
