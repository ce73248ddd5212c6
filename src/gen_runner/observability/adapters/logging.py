from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from gen_runner.observability.domain.logging import LogMessage, level_enabled

if TYPE_CHECKING:
    from gen_runner.config.models import LoggingSettings


@runtime_checkable
class LogSink(Protocol):
    def emit(self, message: LogMessage) -> None:
        """Consume one LogMessage."""
        raise NotImplementedError("LogSink is a port; use a concrete adapter.")


class StdoutLogSink:
    # Prints one compact JSON object per log message.
    def emit(self, message: LogMessage) -> None:
        print(json.dumps(_log_to_dict(message), separators=(",", ":"), ensure_ascii=False, default=str))

    def close(self) -> None:
        return None


class JsonlLogSink:
    # File-backed structured log sink; appends across runs.
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

    @property
    def closed(self) -> bool:
        return self._file.closed


class MemoryLogSink:
    # Keeps messages in memory; handy for asserting on runner diagnostics in tests.
    def __init__(self) -> None:
        self.messages: list[LogMessage] = []

    def emit(self, message: LogMessage) -> None:
        self.messages.append(message)

    def texts(self) -> list[str]:
        return [message.message for message in self.messages]

    def close(self) -> None:
        return None


class LevelFilterSink:
    # Drops messages below the configured threshold before delegating.
    def __init__(self, inner: LogSink, threshold: str) -> None:
        self.inner = inner
        self._threshold = threshold

    def emit(self, message: LogMessage) -> None:
        if level_enabled(message.level, self._threshold):
            self.inner.emit(message)

    def close(self) -> None:
        close = getattr(self.inner, "close", None)
        if close is not None:
            close()


def build_log_sink(settings: LoggingSettings) -> LogSink | None:
    if settings.sink == "none":
        return None
    if settings.sink == "stdout":
        sink: LogSink = StdoutLogSink()
    elif settings.sink == "memory":
        sink = MemoryLogSink()
    else:
        # LoggingSettings guarantees a path for the jsonl sink.
        sink = JsonlLogSink(Path(str(settings.path)))
    return LevelFilterSink(sink, settings.level)


def _log_to_dict(message: LogMessage) -> dict[str, object]:
    return {
        "level": message.level,
        "message": message.message,
        "timestamp": message.timestamp.isoformat().replace("+00:00", "Z"),
        "fields": message.fields,
    }
