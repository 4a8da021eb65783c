import time
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from ..exceptions import ShiplineError


class RunState(str, Enum):
    """Lifecycle of a pipeline run. Strictly linear, terminal on SUCCEEDED/FAILED."""
    INIT = "init"
    BUILDING = "building"
    PUSHING = "pushing"
    DEPLOYING = "deploying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.SUCCEEDED, RunState.FAILED)


# Forward edges only; FAILED is reachable from every non-terminal state
_NEXT = {
    RunState.INIT: RunState.BUILDING,
    RunState.BUILDING: RunState.PUSHING,
    RunState.PUSHING: RunState.DEPLOYING,
    RunState.DEPLOYING: RunState.SUCCEEDED,
}


class StepResult(BaseModel):
    """
        Class represents the outcome of one executed step.
    """
    step: str
    command: List[str]
    image: str
    ok: bool
    exit_code: Optional[int] = None
    detail: str = ""
    duration: float = 0.0


class PipelineRun(BaseModel):
    """
        Class represents one pipeline run and its single outcome.
    """
    name: str
    state: RunState = RunState.INIT
    results: List[StepResult] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    failed_step: Optional[str] = None
    cause: Optional[str] = None
    started_at: float = Field(default_factory=time.time)
    finished_at: Optional[float] = None

    def advance(self, target: RunState) -> None:
        """Move to the next state; anything but the single forward edge is rejected."""
        if self.state.is_terminal:
            raise ShiplineError(f"Run '{self.name}' already finished as '{self.state.value}'.")
        if _NEXT[self.state] is not target:
            raise ShiplineError(
                f"Illegal transition '{self.state.value}' -> '{target.value}' in run '{self.name}'."
            )
        self.state = target
        if target.is_terminal:
            self.finished_at = time.time()

    def fail(self, step: str, cause: str) -> None:
        if self.state.is_terminal:
            raise ShiplineError(f"Run '{self.name}' already finished as '{self.state.value}'.")
        self.state = RunState.FAILED
        self.failed_step = step
        self.cause = cause
        self.finished_at = time.time()

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.SUCCEEDED

    @property
    def outcome(self) -> str:
        if self.state is RunState.FAILED:
            return f"Failed(step={self.failed_step!r}, cause={self.cause!r})"
        return self.state.value.capitalize()
