from typing import List
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .. import constants
from ..exceptions import ConfigValidationError


class BuildScope(BaseModel):
    """
        Class represents the transient toolchain stage of the image.

        Nothing in this scope reaches the final image except the pruned
        release directory.
    """
    model_config = ConfigDict(frozen=True)

    toolchain: str
    src_dir: str = constants.BUILD_SRC_DIR
    command: str = constants.BUILD_COMMAND
    release_subdir: str = constants.RELEASE_SUBDIR
    prune: List[str] = Field(default_factory=lambda: list(constants.PRUNED_ARTIFACTS))

    @model_validator(mode='after')
    def check_prune_entries(self) -> 'BuildScope':
        """Prune entries are plain names inside the release directory."""
        for entry in self.prune:
            if not entry or "/" in entry or entry in (".", ".."):
                raise ConfigValidationError(f"Invalid prune entry '{entry}': must be a directory name inside the release directory.")
        return self

    @property
    def release_dir(self) -> str:
        return f"{self.src_dir.rstrip('/')}/{self.release_subdir.strip('/')}"


class RuntimeScope(BaseModel):
    """
        Class represents the persistent, minimal stage that becomes the shipped image.
    """
    model_config = ConfigDict(frozen=True)

    base: str = constants.RUNTIME_BASE
    packages: List[str] = Field(default_factory=lambda: list(constants.RUNTIME_PACKAGES))
    workdir: str = constants.RUNTIME_WORKDIR
    port: int = constants.DEFAULT_PORT
    binary: str

    @property
    def entrypoint(self) -> List[str]:
        return [f"{self.workdir.rstrip('/')}/{self.binary}"]
