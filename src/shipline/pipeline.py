import logging
from pathlib import Path
from typing import List, Optional, Tuple

from . import constants
from .config import Config
from .datacls import ImageReference, PipelineContext, PipelineRun, RunState
from .exceptions import ShiplineError
from .images import BuildProfile, MultiStageImage, select_profile
from .protocols import ContainerBackend, PlatformBackend
from .steps import BuildStep, DeployStep, PushStep, Step
from .substitute import VariableSubstitutor, build_namespace

logger = logging.getLogger(__name__)


class Pipeline:
    """
    Drives one build -> push -> deploy run.

    The variable namespace and the image reference are resolved once in
    `resolve()`, before any step runs; every step then reads the same frozen
    context. Steps run strictly in order and the first failure ends the run.
    """

    def __init__(
        self,
        config: Config,
        container: ContainerBackend,
        platform: PlatformBackend,
        commit: Optional[str] = None,
    ):
        self.config = config
        self.container = container
        self.platform = platform
        self.commit = commit
        self.profile: Optional[BuildProfile] = None
        self.image: Optional[MultiStageImage] = None
        self._ctx: Optional[PipelineContext] = None
        logger.debug(f"Pipeline initialized for '{self.config.name}'. Output dir: '{self.config.output_dir}'")

    @property
    def steps(self) -> Tuple[Step, ...]:
        """The fixed step sequence; order is encoded here, not in the config."""
        return (
            BuildStep(self.container),
            PushStep(self.container),
            DeployStep(self.platform),
        )

    def resolve(self) -> PipelineContext:
        """Resolves namespace, profile, image reference and Dockerfile for the run."""
        if self._ctx is not None:
            return self._ctx

        model = self.config.model
        logger.info(f"[Pipeline] Resolving variables for '{model.name}'...")
        namespace = build_namespace(self.config.substitutions, model.project_id, self.commit)
        substitutor = VariableSubstitutor(namespace)

        image_ref, service, region = substitutor.substitute_all(
            [model.image_ref, model.deploy.service, model.deploy.region]
        )
        deploy_flags = tuple(substitutor.substitute_all(model.deploy.flags))
        image = ImageReference.parse(image_ref)
        logger.info(f"[Pipeline] Image reference: {image}")

        for key in sorted(substitutor.unused()):
            logger.warning(f"Substitution '{key}' is defined but never used.")

        self.profile = select_profile(model.profiles, model.profile)
        self.image = MultiStageImage(model.image, self.profile)

        context_dir = self.config.context_dir
        if not context_dir.is_dir():
            raise ShiplineError(f"Build context '{context_dir}' is not a directory.")

        output_dir = self.config.output_dir
        self._ctx = PipelineContext(
            name=model.name,
            namespace=namespace,
            image=image,
            service=service,
            region=region,
            deploy_flags=deploy_flags,
            context_dir=context_dir,
            dockerfile=output_dir / constants.DOCKERFILE_NAME,
            output_dir=output_dir,
            profile=self.profile.name,
            reproducible=self.profile.reproducible,
        )
        return self._ctx

    def plan(self) -> List[Tuple[str, List[str]]]:
        """The commands a run would execute, without invoking any of them."""
        ctx = self.resolve()
        return [(step.name, step.command(ctx)) for step in self.steps]

    def run(self) -> PipelineRun:
        """Orchestrates the whole run and returns its single outcome."""
        ctx = self.resolve()
        self.image.write(ctx.output_dir)
        logger.debug(f"[Pipeline] Dockerfile digest {self.image.digest()} (profile '{ctx.profile}').")

        run = PipelineRun(name=ctx.name)
        logger.info(f"[Pipeline] Starting run for '{ctx.name}' at commit {ctx.namespace.commit}...")

        for step in self.steps:
            run.advance(step.state)
            result = step.execute(ctx)
            run.results.append(result)
            if not result.ok:
                run.fail(step.name, result.detail)
                logger.error(f"[Pipeline] Run failed at step '{step.name}'.")
                return run
            if step.name == constants.STEP_PUSH:
                run.images.append(result.image)

        run.advance(RunState.SUCCEEDED)
        logger.info(f"[Pipeline] Run succeeded; '{ctx.service}' serves {ctx.image}.")
        return run


def write_manifest(run: PipelineRun, path: Path) -> Path:
    """Writes the JSON record of a run, including its produced images."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(run.model_dump_json(indent=2), encoding="utf-8")
    logger.info(f"Run manifest written to {path}")
    return path
