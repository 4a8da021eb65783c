from typing import Dict, List

from ..utils import override
from .. import constants
from ..datacls import PipelineContext, RunState
from ..protocols import ContainerBackend
from .base import Step


class BuildStep(Step):
    """Builds the multi-stage image and tags it with the run's image reference."""

    name = constants.STEP_BUILD
    state = RunState.BUILDING

    def __init__(self, backend: ContainerBackend):
        self.backend = backend

    @staticmethod
    def labels(ctx: PipelineContext) -> Dict[str, str]:
        return {
            "org.opencontainers.image.revision": ctx.namespace.commit,
            "org.opencontainers.image.title": ctx.service,
        }

    @override
    def command(self, ctx: PipelineContext) -> List[str]:
        command = ["docker", "buildx", "build", "--file", str(ctx.dockerfile), "--tag", str(ctx.image)]
        for key, value in self.labels(ctx).items():
            command += ["--label", f"{key}={value}"]
        return command + ["--load", str(ctx.context_dir)]

    @override
    def _run(self, ctx: PipelineContext) -> None:
        self.backend.build(ctx.context_dir, ctx.dockerfile, str(ctx.image), self.labels(ctx))


class PushStep(Step):
    """Publishes exactly the reference the build step tagged."""

    name = constants.STEP_PUSH
    state = RunState.PUSHING

    def __init__(self, backend: ContainerBackend):
        self.backend = backend

    @override
    def command(self, ctx: PipelineContext) -> List[str]:
        return ["docker", "push", str(ctx.image)]

    @override
    def _run(self, ctx: PipelineContext) -> None:
        self.backend.push(str(ctx.image))
