from .logging import JsonlLogSink, LevelFilterSink, LogSink, MemoryLogSink, StdoutLogSink, build_log_sink

__all__ = ["JsonlLogSink", "LevelFilterSink", "LogSink", "MemoryLogSink", "StdoutLogSink", "build_log_sink"]
