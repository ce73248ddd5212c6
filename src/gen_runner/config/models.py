from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Config models map runner settings and YAML step scripts to typed structures.


class TracingSettings(BaseModel):
    # Per-resumption tracing; records land on RunOutput.trace and the optional sink.
    model_config = ConfigDict(extra="forbid")
    enabled: bool = False
    signature_mode: Literal["type_only", "repr"] = "type_only"
    max_value_len: int = Field(default=256, ge=8)
    sink: Literal["memory", "stdout", "jsonl"] = "memory"
    path: str | None = None

    @model_validator(mode="after")
    def _require_path_for_jsonl(self) -> "TracingSettings":
        if self.sink == "jsonl" and not self.path:
            raise ValueError("tracing.path is required when tracing.sink is 'jsonl'")
        return self


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")
    sink: Literal["none", "stdout", "jsonl", "memory"] = "none"
    level: Literal["debug", "info", "warning", "error"] = "info"
    path: str | None = None

    @model_validator(mode="after")
    def _require_path_for_jsonl(self) -> "LoggingSettings":
        if self.sink == "jsonl" and not self.path:
            raise ValueError("logging.path is required when logging.sink is 'jsonl'")
        return self


class RunnerSettings(BaseModel):
    # strict_completion=False skips steps left over after completion instead of raising.
    model_config = ConfigDict(extra="forbid")
    strict_completion: bool = True
    max_resumptions: int | None = Field(default=None, ge=1)
    tracing: TracingSettings = Field(default_factory=TracingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


class StepDecl(BaseModel):
    # Mirrors GenRunner.declare(name, *args).
    model_config = ConfigDict(extra="forbid")
    name: str = Field(min_length=1)
    args: list[Any] = Field(default_factory=list)


class MatchDecl(BaseModel):
    # Script matches compare the produced value for equality and feed a constant.
    model_config = ConfigDict(extra="forbid")
    name: str = Field(min_length=1)
    value: Any
    feed: Any = None


class ScriptConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    settings: RunnerSettings = Field(default_factory=RunnerSettings)
    steps: list[StepDecl] = Field(default_factory=list)
    matches: list[MatchDecl] = Field(default_factory=list)
    overrides: dict[str, Any] = Field(default_factory=dict)
