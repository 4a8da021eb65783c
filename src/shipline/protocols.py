"""
shipline Protocol Definitions

The external collaborators of the pipeline, reached through fixed
command-line contracts. Protocols are the foundation layer with zero
dependencies on other shipline modules.
"""

from pathlib import Path
from typing import Dict, Protocol, Sequence, runtime_checkable


@runtime_checkable
class ContainerBackend(Protocol):
    """
    Protocol for the container runtime and the image registry.

    Implementations block until the underlying process exits and raise
    BuildStepError / PushStepError carrying the tool's own diagnostics.
    """

    def build(self, context: Path, dockerfile: Path, tag: str, labels: Dict[str, str]) -> None:
        """
        Build the image from `context` and tag it.

        Args:
            context: Build Context directory
            dockerfile: Rendered multi-stage Dockerfile
            tag: Fully-qualified image reference
            labels: Image labels
        """
        ...

    def push(self, tag: str) -> None:
        """
        Publish the tagged image to its registry.

        Args:
            tag: Fully-qualified image reference, as built
        """
        ...


@runtime_checkable
class PlatformBackend(Protocol):
    """
    Protocol for the managed compute platform.

    Implementations raise DeployStepError; the previously running revision
    is the platform's business.
    """

    def deploy(self, service: str, image: str, region: str, project: str, flags: Sequence[str] = ()) -> None:
        """
        Deploy `image` as the running revision of `service`.

        Args:
            service: Service name on the platform
            image: Fully-qualified image reference, as pushed
            region: Target region
            project: Project id
            flags: Extra platform flags
        """
        ...
