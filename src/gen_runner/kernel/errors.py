from __future__ import annotations


class AlreadyDoneError(RuntimeError):
    # Raised when a declared step would resume a coroutine that already completed.
    def __init__(self, step_name: str) -> None:
        super().__init__(f"Attempting to call '{step_name}', generator runner is already done")
        self.step_name = step_name


class OutputNotFoundError(KeyError):
    # Lookup failures are KeyErrors so mapping-style callers can catch them uniformly.
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"No step or match output recorded under '{self.name}'"


class ResumptionLimitError(RuntimeError):
    def __init__(self, step_name: str, limit: int) -> None:
        super().__init__(f"Resumption limit {limit} exceeded while attempting '{step_name}'")
        self.step_name = step_name
        self.limit = limit
