import logging
from typing import Dict

from pydantic import BaseModel, ConfigDict

from ..config import ProfileModel
from ..exceptions import ProfileError

logger = logging.getLogger(__name__)


class BuildProfile(BaseModel):
    """
    A named choice of toolchain base image for the build stage.

    `pinned` names an explicit toolchain version and is reproducible;
    `floating` tracks the newest toolchain and is not.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    toolchain: str
    reproducible: bool


def select_profile(profiles: Dict[str, ProfileModel], name: str) -> BuildProfile:
    """Pick one profile explicitly; there is no implicit default between them."""
    if name not in profiles:
        raise ProfileError(f"Unknown build profile '{name}', must be one of {sorted(profiles)}.")
    conf = profiles[name]
    profile = BuildProfile(name=name, toolchain=conf.toolchain, reproducible=bool(conf.reproducible))
    if not profile.reproducible:
        logger.warning(f"Build profile '{name}' uses toolchain '{profile.toolchain}'; builds are not reproducible.")
    logger.debug(f"Selected build profile '{name}' ({profile.toolchain}).")
    return profile
