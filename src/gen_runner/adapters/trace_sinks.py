from __future__ import annotations

import json
import sys
from dataclasses import asdict
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from gen_runner.config.models import TracingSettings
    from gen_runner.kernel.trace import TraceRecord


@runtime_checkable
class TraceSink(Protocol):
    def emit(self, record: "TraceRecord") -> None:
        """Consume one TraceRecord."""
        raise NotImplementedError("TraceSink is a port; use a concrete adapter.")

    def flush(self) -> None:
        """Flush buffered trace output if supported."""
        raise NotImplementedError("TraceSink is a port; use a concrete adapter.")

    def close(self) -> None:
        """Close the sink and release resources."""
        raise NotImplementedError("TraceSink is a port; use a concrete adapter.")


class JsonlTraceSink:
    # One TraceRecord per line; flushed every ``flush_every_n`` records and at run end.
    def __init__(self, *, path: Path, flush_every_n: int = 1) -> None:
        self._path = path
        self._flush_every_n = max(1, flush_every_n)
        self._emit_count = 0
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self._path.open("a", encoding="utf-8")

    def emit(self, record: "TraceRecord") -> None:
        self._handle.write(_dump(record) + "\n")
        self._emit_count += 1
        if self._emit_count % self._flush_every_n == 0:
            self.flush()

    def flush(self) -> None:
        self._handle.flush()

    def close(self) -> None:
        self.flush()
        self._handle.close()

    @property
    def closed(self) -> bool:
        return self._handle.closed


class StdoutTraceSink:
    def emit(self, record: "TraceRecord") -> None:
        sys.stdout.write(_dump(record) + "\n")

    def flush(self) -> None:
        sys.stdout.flush()

    def close(self) -> None:
        self.flush()


def build_trace_sink(settings: "TracingSettings") -> TraceSink | None:
    # "memory" keeps records on RunOutput.trace only.
    if not settings.enabled or settings.sink == "memory":
        return None
    if settings.sink == "stdout":
        return StdoutTraceSink()
    return JsonlTraceSink(path=Path(str(settings.path)))


def _dump(record: "TraceRecord") -> str:
    return json.dumps(asdict(record), separators=(",", ":"), ensure_ascii=False, default=_json_default)


def _json_default(obj: object) -> str:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat().replace("+00:00", "Z")
    return str(obj)
