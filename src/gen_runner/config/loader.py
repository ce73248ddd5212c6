from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from gen_runner.config.models import RunnerSettings, ScriptConfig


class ConfigError(ValueError):
    # Raised for invalid runner settings or step scripts (fail fast).
    pass


def load_yaml_config(path: Path) -> dict[str, object]:
    # Returns the raw mapping; validation happens in the typed loaders below.
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    return raw


def load_settings(path: Path) -> RunnerSettings:
    raw = load_yaml_config(path)
    try:
        return RunnerSettings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid runner settings in {path}: {exc}") from exc


def load_script(path: Path) -> ScriptConfig:
    """Load a YAML step script.

    Example::

        steps:
          - name: init
            args: [[1, 2, 3]]
          - name: a
            args: [{other: a value}]
          - name: other
        matches:
          - name: b
            value: {extraArg: [2, 3, 4]}
        overrides:
          a: {other: a different value}
    """
    raw = load_yaml_config(path)
    try:
        return ScriptConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid step script in {path}: {exc}") from exc
