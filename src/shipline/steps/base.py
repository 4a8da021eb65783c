import logging
import time
from abc import ABC, abstractmethod
from typing import List

from ..datacls import PipelineContext, RunState, StepResult
from ..exceptions import StepError

logger = logging.getLogger(__name__)


class Step(ABC):
    """
    Abstract class for one pipeline step.

    A step renders its command from the resolved context and runs it through
    a backend. The backend's StepError becomes a failed StepResult; any other
    exception is a bug and propagates.
    """

    name: str = ""
    state: RunState = RunState.INIT

    @abstractmethod
    def command(self, ctx: PipelineContext) -> List[str]:
        """
        The external command this step stands for, with all variables resolved.

        Args:
            ctx: The resolved pipeline context
        Returns:
            argv as it would be typed by an operator
        """
        pass

    @abstractmethod
    def _run(self, ctx: PipelineContext) -> None:
        """Invoke the backend; raise StepError on failure."""
        pass

    def execute(self, ctx: PipelineContext) -> StepResult:
        command = self.command(ctx)
        logger.info(f"[{self.name}] {' '.join(command)}")
        start = time.monotonic()
        try:
            self._run(ctx)
        except StepError as e:
            logger.error(f"[{self.name}] failed (exit {e.exit_code}): {e.cause}")
            return StepResult(
                step=self.name, command=command, image=str(ctx.image), ok=False,
                exit_code=e.exit_code, detail=e.cause, duration=time.monotonic() - start,
            )
        logger.info(f"[{self.name}] done.")
        return StepResult(
            step=self.name, command=command, image=str(ctx.image), ok=True,
            exit_code=0, duration=time.monotonic() - start,
        )
