from gen_runner.config import RunnerSettings, ScriptConfig, load_script
from gen_runner.kernel import (
    AlreadyDoneError,
    CoroutineHandle,
    GenRunner,
    OutputNotFoundError,
    Produced,
    ResumptionLimitError,
    RunOutput,
    gen_runner,
    value_equals,
)

__all__ = [
    "AlreadyDoneError",
    "CoroutineHandle",
    "GenRunner",
    "OutputNotFoundError",
    "Produced",
    "ResumptionLimitError",
    "RunOutput",
    "RunnerSettings",
    "ScriptConfig",
    "gen_runner",
    "load_script",
    "value_equals",
]
