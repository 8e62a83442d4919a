from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

LEVELS = ("debug", "info", "warning", "error")


@dataclass(frozen=True, slots=True)
class LogMessage:
    # Structured log payload emitted to a LogSink.
    level: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    fields: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.level or not self.message:
            raise ValueError("LogMessage requires non-empty level/message")
        if self.level not in LEVELS:
            raise ValueError(f"LogMessage level must be one of {LEVELS}")


def level_enabled(level: str, minimum: str) -> bool:
    return LEVELS.index(level) >= LEVELS.index(minimum)
