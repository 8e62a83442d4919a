from __future__ import annotations

from typing import Protocol, runtime_checkable

from stepcore.domain.logging import LogMessage


@runtime_checkable
class LogSink(Protocol):
    def emit(self, message: LogMessage) -> None:
        """Consume one LogMessage."""
        raise NotImplementedError("LogSink is a port; use a concrete adapter.")
