from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from scenario_kernel.config.models import LoggingConfig
from scenario_kernel.observability.domain.logging import LOG_LEVELS, LogMessage


class LogSink(Protocol):
    # Anything that accepts structured log messages.
    def emit(self, message: LogMessage) -> None:
        raise NotImplementedError("LogSink protocol has no implementation")


class _LevelFilter:
    __slots__ = ("_threshold",)

    def __init__(self, level: str) -> None:
        if level not in LOG_LEVELS:
            raise ValueError(f"log level must be one of: {sorted(LOG_LEVELS)}")
        self._threshold = LOG_LEVELS[level]

    def accepts(self, message: LogMessage) -> bool:
        return message.severity >= self._threshold


class StdoutLogSink:
    # Compact JSON object per line on stdout.
    def __init__(self, level: str = "INFO") -> None:
        self._filter = _LevelFilter(level)

    def emit(self, message: LogMessage) -> None:
        if not self._filter.accepts(message):
            return
        print(json.dumps(_log_to_dict(message), separators=(",", ":"), ensure_ascii=False, default=str))


class JsonlLogSink:
    # File-backed structured log sink; appends and flushes one record per line.
    def __init__(self, path: Path, level: str = "INFO") -> None:
        self._filter = _LevelFilter(level)
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self._path.open("a", encoding="utf-8")

    def emit(self, message: LogMessage) -> None:
        if not self._filter.accepts(message):
            return
        payload = json.dumps(_log_to_dict(message), separators=(",", ":"), ensure_ascii=False, default=str)
        self._file.write(payload + "\n")
        self._file.flush()

    def close(self) -> None:
        self._file.close()


class InMemoryLogSink:
    # Keeps emitted messages in order; handy for tests and interactive inspection.
    def __init__(self, level: str = "DEBUG") -> None:
        self._filter = _LevelFilter(level)
        self.messages: list[LogMessage] = []

    def emit(self, message: LogMessage) -> None:
        if self._filter.accepts(message):
            self.messages.append(message)

    def named(self, message: str) -> list[LogMessage]:
        return [m for m in self.messages if m.message == message]


def build_log_sink(settings: LoggingConfig) -> LogSink | None:
    # Map the logging section of the kernel config onto a concrete sink.
    if settings.sink == "none":
        return None
    if settings.sink == "stdout":
        return StdoutLogSink(level=settings.level)
    if settings.path is None:
        raise ValueError("logging.path must be set for the jsonl sink")
    return JsonlLogSink(Path(settings.path), level=settings.level)


def _log_to_dict(message: LogMessage) -> dict[str, object]:
    return {
        "level": message.level,
        "message": message.message,
        "timestamp": message.timestamp.isoformat().replace("+00:00", "Z"),
        "fields": message.fields,
    }
