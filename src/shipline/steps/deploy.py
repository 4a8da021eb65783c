from typing import List

from ..utils import override
from .. import constants
from ..backends import deploy_command
from ..datacls import PipelineContext, RunState
from ..protocols import PlatformBackend
from .base import Step


class DeployStep(Step):
    """Points the managed service at the pushed image reference."""

    name = constants.STEP_DEPLOY
    state = RunState.DEPLOYING

    def __init__(self, backend: PlatformBackend):
        self.backend = backend

    @override
    def command(self, ctx: PipelineContext) -> List[str]:
        return deploy_command(ctx.service, str(ctx.image), ctx.region, ctx.namespace.project_id, ctx.deploy_flags)

    @override
    def _run(self, ctx: PipelineContext) -> None:
        self.backend.deploy(ctx.service, str(ctx.image), ctx.region, ctx.namespace.project_id, ctx.deploy_flags)
