from .trace_sinks import JsonlTraceSink, StdoutTraceSink, TraceSink, build_trace_sink

__all__ = ["JsonlTraceSink", "StdoutTraceSink", "TraceSink", "build_trace_sink"]
