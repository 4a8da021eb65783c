import hashlib
import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Optional

from .. import constants
from ..config import ImageModel
from ..datacls import BuildScope, RuntimeScope
from ..exceptions import BuildStepError
from .profiles import BuildProfile

logger = logging.getLogger(__name__)


class MultiStageImage:
    """
    Describes the two-stage image of the service.

    The build scope compiles the whole context with the profile's toolchain
    and prunes intermediate outputs from the release directory. The runtime
    scope starts from a minimal base and copies only that directory.
    """

    def __init__(self, image: ImageModel, profile: BuildProfile):
        self.profile = profile
        self.build_scope = BuildScope(
            toolchain=profile.toolchain,
            command=image.build_command,
            prune=image.prune,
        )
        self.runtime_scope = RuntimeScope(
            base=image.runtime_base,
            packages=image.packages,
            workdir=image.workdir,
            port=image.port,
            binary=image.binary,
        )
        self._dcr_cache: Optional[str] = None

    @property
    def port(self) -> int:
        return self.runtime_scope.port

    @property
    def entrypoint(self) -> list:
        return self.runtime_scope.entrypoint

    def _get_template_vars(self) -> Dict[str, Any]:
        """Provides a dictionary of variables for formatting the Dockerfile template."""
        build, runtime = self.build_scope, self.runtime_scope

        prune_block = ""
        if build.prune:
            prune_block = "\nRUN rm -rf " + " ".join(f"./{entry}" for entry in build.prune)

        install_block = ""
        if runtime.packages:
            install_block = (
                f"\nRUN apt-get update && apt-get install -y {' '.join(runtime.packages)} && \\\n"
                f"    rm -rf /var/lib/apt/lists/*"
            )

        return {
            "toolchain": build.toolchain,
            "src_dir": build.src_dir,
            "build_command": build.command,
            "release_dir": build.release_dir,
            "prune_block": prune_block,
            "runtime_base": runtime.base,
            "install_block": install_block,
            "workdir": runtime.workdir,
            "port": runtime.port,
            "entrypoint": json.dumps(runtime.entrypoint),
        }

    def render(self) -> str:
        """Loads the multi-stage template and formats it with both scopes."""
        if self._dcr_cache is None:
            try:
                template = resources.files('shipline.resources.templates').joinpath(
                    constants.MULTISTAGE_TEMPLATE
                ).read_text(encoding='utf-8')
            except FileNotFoundError:
                raise BuildStepError(f"Dockerfile template '{constants.MULTISTAGE_TEMPLATE}' not found.")
            self._dcr_cache = template.format(**self._get_template_vars())
        return self._dcr_cache

    def digest(self) -> str:
        """sha256 of the rendered Dockerfile; stable for a pinned profile."""
        return hashlib.sha256(self.render().encode("utf-8")).hexdigest()

    def write(self, directory: Path) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        dockerfile_path = directory / constants.DOCKERFILE_NAME
        dockerfile_path.write_text(self.render(), encoding='utf-8')
        logger.info(f"Dockerfile for profile '{self.profile.name}' written to {dockerfile_path}")
        return dockerfile_path
