import logging
import subprocess
from typing import List, Sequence

from .. import constants
from ..exceptions import DeployStepError

logger = logging.getLogger(__name__)


def deploy_command(service: str, image: str, region: str, project: str, flags: Sequence[str] = ()) -> List[str]:
    """argv of `gcloud run deploy` for one service revision."""
    return [
        constants.GCLOUD_BINARY, "run", "deploy", service,
        "--image", image,
        "--region", region,
        "--project", project,
        "--quiet",
        *flags,
    ]


class GcloudBackend:
    """Cloud Run backend; shells out to the gcloud CLI and waits for it."""

    def __init__(self, binary: str = constants.GCLOUD_BINARY):
        self.binary = binary

    def deploy(self, service: str, image: str, region: str, project: str, flags: Sequence[str] = ()) -> None:
        command = deploy_command(service, image, region, project, flags)
        command[0] = self.binary
        logger.info(f"Deploying '{image}' to service '{service}' in '{region}'...")
        logger.debug(f"Executing: {' '.join(command)}")
        try:
            result = subprocess.run(command, capture_output=True, text=True, check=True)
        except FileNotFoundError:
            raise DeployStepError(f"'{self.binary}' executable not found on PATH.", 127)
        except subprocess.CalledProcessError as e:
            raise DeployStepError((e.stderr or e.stdout or str(e)).strip(), e.returncode)
        if result.stderr:
            logger.debug(result.stderr.strip())
        logger.info(f"Service '{service}' now serves '{image}'.")
