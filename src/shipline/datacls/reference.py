import re
from typing import Optional
from pydantic import BaseModel, ConfigDict, model_validator

from .. import constants
from ..exceptions import ImageReferenceError

# Path components of an Artifact Registry image (docker distribution grammar)
_COMPONENT = re.compile(r"^[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*$")
_TAG = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]{0,127}$")
_REFERENCE = re.compile(
    r"^(?P<location>[a-z0-9-]+)" + re.escape(constants.REGISTRY_HOST_SUFFIX)
    + r"/(?P<project>[^/:]+)/(?P<repository>[^/:]+)/(?P<image>[^/:]+)/(?P<service>[^/:]+)"
    + r"(?::(?P<tag>[^/:]*))?$"
)


class ImageReference(BaseModel):
    """
        Class represents a fully-qualified, versioned image in Artifact Registry.

        Rendered as `{location}-docker.pkg.dev/{project}/{repository}/{image}/{service}:{tag}`.
        One instance is derived per run and handed unchanged to every step.
    """
    model_config = ConfigDict(frozen=True)

    location: str
    project: str
    repository: str
    image: str
    service: str
    tag: str

    @model_validator(mode='after')
    def check_components(self) -> 'ImageReference':
        """Reject empty or malformed path components and floating tags."""
        for field in ("location", "project", "repository", "image", "service"):
            value = getattr(self, field)
            if not value:
                raise ImageReferenceError(f"Image reference component '{field}' is empty.")
            if not _COMPONENT.match(value):
                raise ImageReferenceError(f"Image reference component '{field}' is malformed: '{value}'.")

        if not self.tag:
            raise ImageReferenceError("Image reference has no version tag.")
        if not _TAG.match(self.tag):
            raise ImageReferenceError(f"Version tag '{self.tag}' is not a valid image tag.")
        if self.tag == constants.FLOATING_TAG:
            raise ImageReferenceError(
                f"Version tag '{constants.FLOATING_TAG}' is not allowed; tags must identify a single commit."
            )
        return self

    @classmethod
    def parse(cls, text: str) -> 'ImageReference':
        """Parse a rendered reference string back into its components."""
        match = _REFERENCE.match(text.strip())
        if not match:
            raise ImageReferenceError(
                f"'{text}' is not of the form "
                f"'<location>{constants.REGISTRY_HOST_SUFFIX}/<project>/<repository>/<image>/<service>:<tag>'."
            )
        parts = match.groupdict()
        parts["tag"] = parts["tag"] or ""
        return cls(**parts)

    @property
    def registry(self) -> str:
        return f"{self.location}{constants.REGISTRY_HOST_SUFFIX}"

    @property
    def repository_path(self) -> str:
        """Reference without the tag."""
        return f"{self.registry}/{self.project}/{self.repository}/{self.image}/{self.service}"

    def with_tag(self, tag: Optional[str]) -> 'ImageReference':
        return ImageReference(**{**self.model_dump(), "tag": tag or ""})

    def __str__(self) -> str:
        return f"{self.repository_path}:{self.tag}"
