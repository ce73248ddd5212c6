from .builder import GenRunner, gen_runner
from .coroutine import CoroutineFactory, CoroutineHandle, GeneratorHandle, Produced, as_handle, feed_value
from .errors import AlreadyDoneError, OutputNotFoundError, ResumptionLimitError
from .matching import MatchRegistry, MatchRule, feed, first_match, value_equals
from .output import OutputEntry, RunOutput
from .runner import Runner, RunState
from .steps import Step, StepQueue
from .trace import ErrorInfo, TraceRecord, TraceRecorder, ValueSignature

__all__ = [
    "GenRunner",
    "gen_runner",
    "CoroutineFactory",
    "CoroutineHandle",
    "GeneratorHandle",
    "Produced",
    "as_handle",
    "feed_value",
    "AlreadyDoneError",
    "OutputNotFoundError",
    "ResumptionLimitError",
    "MatchRegistry",
    "MatchRule",
    "feed",
    "first_match",
    "value_equals",
    "OutputEntry",
    "RunOutput",
    "Runner",
    "RunState",
    "Step",
    "StepQueue",
    "ErrorInfo",
    "TraceRecord",
    "TraceRecorder",
    "ValueSignature",
]
