"""
shipline Pipeline Context

This module contains the data classes holding the resolved, read-only state
for one pipeline run: the variable namespace and everything derived from it.
"""

from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .. import constants
from .reference import ImageReference


class VariableNamespace(BaseModel):
    """
    The substitution variables of a run, resolved once before any step.

    Holds the built-ins (PROJECT_ID, COMMIT_SHA, SHORT_SHA) and the user
    substitutions (`_LOCATION`, `_REPOSITORY`, ...). The mapping is exposed
    read-only.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    values: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator('values', mode='after')
    @classmethod
    def freeze_values(cls, values: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(values))

    def __contains__(self, key: str) -> bool:
        return key in self.values

    def __getitem__(self, key: str) -> str:
        return self.values[key]

    def as_dict(self) -> Dict[str, str]:
        return dict(self.values)

    @property
    def commit(self) -> str:
        return self.values[constants.BUILTIN_COMMIT_SHA]

    @property
    def project_id(self) -> str:
        return self.values[constants.BUILTIN_PROJECT_ID]


class PipelineContext(BaseModel):
    """
    Holds the shared, immutable state for a pipeline run.

    Every step reads the same `image` instance, so the reference built,
    pushed and deployed is the same object.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    namespace: VariableNamespace
    image: ImageReference
    service: str
    region: str
    deploy_flags: Tuple[str, ...] = ()
    context_dir: Path
    dockerfile: Path
    output_dir: Path
    profile: str
    reproducible: bool = False
