import re
import yaml
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator, ConfigDict

from . import constants
from .exceptions import (
    ConfigParsingError,
    ConfigFileMissingError,
    ConfigValidationError,
    InvalidSubstitutionError,
    ProfileError,
)


logger = logging.getLogger(__name__)

_USER_KEY = re.compile(constants.USER_SUBSTITUTION_PATTERN)


class ProfileModel(BaseModel):
    """
        Class Config-Validation Model describe one entry of `profiles`
    """
    toolchain: str
    reproducible: Optional[bool] = None

    @model_validator(mode='after')
    def check_toolchain_tag(self) -> 'ProfileModel':
        """A reproducible profile needs an explicit toolchain version"""
        tag = self.tag
        floating = tag in ("", constants.FLOATING_TAG)
        if self.reproducible is None:
            self.reproducible = not floating
        elif self.reproducible and floating:
            raise ProfileError(
                f"Toolchain '{self.toolchain}' has no pinned version; a reproducible profile needs e.g. "
                f"'{constants.DEFAULT_TOOLCHAIN}:{constants.DEFAULT_PINNED_VERSION}'."
            )
        return self

    @property
    def tag(self) -> str:
        # 'registry:5000/rust' has a port, not a tag
        name = self.toolchain.rsplit("/", 1)[-1]
        return name.split(":", 1)[1] if ":" in name else ""


class ImageModel(BaseModel):
    """
        Class Config-Validation Model describe `image`
    """
    binary: str
    port: int = Field(default=constants.DEFAULT_PORT, ge=1, le=65535)
    packages: List[str] = Field(default_factory=lambda: list(constants.RUNTIME_PACKAGES))
    prune: List[str] = Field(default_factory=lambda: list(constants.PRUNED_ARTIFACTS))
    runtime_base: str = constants.RUNTIME_BASE
    workdir: str = constants.RUNTIME_WORKDIR
    build_command: str = constants.BUILD_COMMAND

    @field_validator('binary')
    @classmethod
    def check_binary(cls, value: str) -> str:
        if not value or "/" in value:
            raise ValueError(f"binary must be a plain file name, got '{value}'")
        return value


class DeployModel(BaseModel):
    """
        Class Config-Validation Model describe `deploy`
    """
    service: str = constants.DEFAULT_SERVICE
    region: str = constants.DEFAULT_REGION
    flags: List[str] = Field(default_factory=list)


class PipelineConfigModel(BaseModel):
    """
        Class Config-Validation Model desribe top-level of config
    """
    name: str
    project_id: Optional[str] = None
    substitutions: Dict[str, str] = Field(default_factory=dict)
    image_ref: str = constants.DEFAULT_IMAGE_REF
    context: str = "."
    output: str = "output"
    profile: str = constants.PROFILE_PINNED
    profiles: Dict[str, ProfileModel] = Field(default_factory=dict, validate_default=True)
    image: ImageModel
    deploy: DeployModel = Field(default_factory=DeployModel)
    model_config = ConfigDict(extra="forbid")

    @field_validator('substitutions', mode='before')
    @classmethod
    def stringify_substitutions(cls, value: Any) -> Any:
        """YAML turns `_PORT: 8080` into an int; substitutions are always strings"""
        if isinstance(value, dict):
            return {k: "" if v is None else str(v) for k, v in value.items()}
        return value

    @field_validator('profiles', mode='before')
    @classmethod
    def merge_default_profiles(cls, value: Any) -> Any:
        """User profiles extend or override the built-in 'pinned' and 'floating'"""
        merged: Dict[str, Any] = {name: dict(conf) for name, conf in constants.DEFAULT_PROFILES.items()}
        for name, conf in (value or {}).items():
            if isinstance(conf, str):
                conf = {"toolchain": conf}
            if name in merged and isinstance(conf, dict):
                # 'pinned' keeps reproducible=True whatever toolchain overrides it
                if name != constants.PROFILE_PINNED and "toolchain" in conf and "reproducible" not in conf:
                    merged[name].pop("reproducible", None)
                merged[name].update(conf)
            else:
                merged[name] = conf
        return merged

    @model_validator(mode='after')
    def validate_substitution_keys(self) -> 'PipelineConfigModel':
        """User substitutions start with '_' and never shadow the built-ins"""
        for key in self.substitutions:
            if key in constants.BUILTIN_VARIABLES:
                raise InvalidSubstitutionError(f"Substitution '{key}' is built in and cannot be overridden here.")
            if not _USER_KEY.match(key):
                raise InvalidSubstitutionError(
                    f"Invalid substitution key '{key}': user substitutions must match '{constants.USER_SUBSTITUTION_PATTERN}'."
                )
        return self

    @model_validator(mode='after')
    def validate_profile_selected(self) -> 'PipelineConfigModel':
        if not self.profiles[constants.PROFILE_PINNED].reproducible:
            raise ProfileError(f"Profile '{constants.PROFILE_PINNED}' is always reproducible and cannot be marked otherwise.")
        if self.profile not in self.profiles:
            raise ProfileError(f"Unknown build profile '{self.profile}', must be one of {sorted(self.profiles)}.")
        return self


class Config:
    """
    Loads and validates the pipeline YAML file using Pydantic models.
    It is the sole gatekeeper for configuration.
    """
    def __init__(self, config_path: str):
        self.path = Path(config_path)
        logger.info(f"Loading configuration from '{self.path}'...")
        raw_data = self._load_raw_config()
        self.model = self.validate(raw_data)

    @staticmethod
    def validate(data: Dict[str, Any]) -> PipelineConfigModel:
        logger.debug("Validating configuration structure with Pydantic...")
        try:
            model = PipelineConfigModel.model_validate(data)
        except ValidationError as e:
            raise ConfigValidationError(f"Configuration validation failed:\n{e}")
        logger.debug(f"Configuration model validated successfully: \n{model.model_dump_json(indent=2)}")
        logger.info("Configuration validation passed.")
        return model

    def _load_raw_config(self) -> Dict[str, Any]:
        try:
            content = self.path.read_text(encoding="utf-8")
            config_data = yaml.safe_load(content)
        except FileNotFoundError:
            raise ConfigFileMissingError(f"Configuration file not found at: {self.path}")
        except yaml.YAMLError as e:
            raise ConfigParsingError(f"Error parsing YAML file: {e}")
        if not isinstance(config_data, dict):
            raise ConfigParsingError("Configuration file must be a YAML document containing a dictionary.")
        logger.debug(f"Successfully parsed YAML from '{self.path}'.")
        return config_data

    def override(self, **updates: Any) -> None:
        """Re-validate the config with CLI-level overrides applied on top."""
        data = self.model.model_dump()
        for key, value in updates.items():
            if value is None:
                continue
            if key == "substitutions":
                data["substitutions"] = {**data["substitutions"], **value}
            else:
                data[key] = value
        self.model = self.validate(data)

    @property
    def name(self) -> str:
        return self.model.name

    @property
    def base_dir(self) -> Path:
        return self.path.parent

    @property
    def context_dir(self) -> Path:
        context = Path(self.model.context)
        return context if context.is_absolute() else (self.base_dir / context).resolve()

    @property
    def profile(self) -> ProfileModel:
        return self.model.profiles[self.model.profile]

    @property
    def substitutions(self) -> Dict[str, str]:
        return dict(self.model.substitutions)

    @property
    def output_dir(self) -> Path:
        output = Path(self.model.output)
        output = output if output.is_absolute() else self.base_dir / output
        return output / self.model.name
