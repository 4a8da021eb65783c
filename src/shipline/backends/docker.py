import logging
from pathlib import Path
from typing import Dict, Optional

from python_on_whales import DockerClient, DockerException
from python_on_whales.client_config import ClientNotFoundError

from ..exceptions import BuildStepError, PushStepError

logger = logging.getLogger(__name__)


def _detail(e: DockerException) -> str:
    # stderr holds the toolchain/registry diagnostic; fall back to the message
    return (e.stderr or e.stdout or str(e)).strip()


class WhalesBackend:
    """Docker CLI backend via python-on-whales; every call blocks until docker exits."""

    def __init__(self, client: Optional[DockerClient] = None):
        self.client = client or DockerClient()

    def build(self, context: Path, dockerfile: Path, tag: str, labels: Dict[str, str]) -> None:
        logger.info(f"Building image '{tag}' from '{context}'...")
        try:
            self.client.buildx.build(
                str(context),
                file=str(dockerfile),
                tags=[tag],
                labels=labels,
                load=True,
            )
        except DockerException as e:
            raise BuildStepError(_detail(e), e.return_code)
        except ClientNotFoundError as e:
            raise BuildStepError(str(e), 127)
        logger.info(f"Image '{tag}' built.")

    def push(self, tag: str) -> None:
        logger.info(f"Pushing image '{tag}'...")
        try:
            self.client.image.push(tag)
        except DockerException as e:
            raise PushStepError(_detail(e), e.return_code)
        except ClientNotFoundError as e:
            raise PushStepError(str(e), 127)
        logger.info(f"Image '{tag}' pushed.")
