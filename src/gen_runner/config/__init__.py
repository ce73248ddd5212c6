from .loader import ConfigError, load_script, load_settings, load_yaml_config
from .models import LoggingSettings, MatchDecl, RunnerSettings, ScriptConfig, StepDecl, TracingSettings

__all__ = [
    "ConfigError",
    "load_script",
    "load_settings",
    "load_yaml_config",
    "LoggingSettings",
    "MatchDecl",
    "RunnerSettings",
    "ScriptConfig",
    "StepDecl",
    "TracingSettings",
]
