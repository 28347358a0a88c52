from .logging import InMemoryLogSink, JsonlLogSink, LogSink, StdoutLogSink, build_log_sink

__all__ = ["LogSink", "StdoutLogSink", "JsonlLogSink", "InMemoryLogSink", "build_log_sink"]
