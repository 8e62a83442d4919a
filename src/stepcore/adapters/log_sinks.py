from __future__ import annotations

import json
from pathlib import Path

from stepcore.config.models import LogConfig
from stepcore.domain.logging import LogMessage, level_enabled
from stepcore.ports.log_sink import LogSink


class StdoutLogSink:
    # Structured log sink printing one JSON object per line.
    def emit(self, message: LogMessage) -> None:
        print(json.dumps(_log_to_dict(message), separators=(",", ":"), ensure_ascii=False, default=str))


class JsonlLogSink:
    # File-backed structured log sink; appends so several runs can share a file.
    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self._path.open("a", encoding="utf-8")

    def emit(self, message: LogMessage) -> None:
        payload = json.dumps(_log_to_dict(message), separators=(",", ":"), ensure_ascii=False, default=str)
        self._file.write(payload + "\n")
        self._file.flush()

    def close(self) -> None:
        self._file.close()


class MemoryLogSink:
    # Keeps messages in memory; used by tests and by callers that render logs themselves.
    def __init__(self) -> None:
        self.messages: list[LogMessage] = []

    def emit(self, message: LogMessage) -> None:
        self.messages.append(message)


class LevelFilterSink:
    # Drops messages below a minimum level before they reach the wrapped sink.
    def __init__(self, inner: LogSink, minimum: str) -> None:
        self._inner = inner
        self._minimum = minimum

    def emit(self, message: LogMessage) -> None:
        if level_enabled(message.level, self._minimum):
            self._inner.emit(message)

    def close(self) -> None:
        close = getattr(self._inner, "close", None)
        if close is not None:
            close()


def build_log_sink(config: LogConfig) -> LogSink | None:
    if config.sink == "none":
        return None
    if config.sink == "jsonl":
        if not config.path:
            raise ValueError("log.path must be a non-empty string for the jsonl sink")
        return LevelFilterSink(JsonlLogSink(Path(config.path)), config.level)
    return LevelFilterSink(StdoutLogSink(), config.level)


def _log_to_dict(message: LogMessage) -> dict[str, object]:
    return {
        "level": message.level,
        "message": message.message,
        "timestamp": message.timestamp.isoformat().replace("+00:00", "Z"),
        "fields": message.fields,
    }
