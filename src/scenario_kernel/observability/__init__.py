from .adapters import InMemoryLogSink, JsonlLogSink, LogSink, StdoutLogSink, build_log_sink
from .domain import LOG_LEVELS, LogMessage

__all__ = [
    "LOG_LEVELS",
    "LogMessage",
    "LogSink",
    "StdoutLogSink",
    "JsonlLogSink",
    "InMemoryLogSink",
    "build_log_sink",
]
