class ShiplineError(Exception):
    """Base exception for all application-specific errors."""

    pass


# --- 1. Errors related to loading and parsing the configuration file ---
class ConfigurationError(ShiplineError):
    """Base class for errors encountered while finding, reading, or parsing config files."""

    pass


class ConfigFileMissingError(ConfigurationError):
    """Raised when the pipeline configuration file cannot be found."""

    pass


class ConfigParsingError(ConfigurationError):
    """Raised when a YAML configuration file is syntactically incorrect."""

    pass


class ConfigValidationError(ConfigurationError):
    """Raised when the configuration fails structural validation (e.g., Pydantic)."""

    pass


class ProfileError(ConfigurationError):
    """Raised for an unknown build profile or a pinned profile using a floating toolchain."""

    pass


# --- 2. Errors raised while resolving the variable namespace, before any step runs ---
class ResolutionError(ShiplineError):
    """Base class for substitution and image reference resolution errors."""

    pass


class UndefinedVariableError(ResolutionError):
    """Raised when a template references a variable that is not in the namespace."""

    pass


class InvalidSubstitutionError(ResolutionError):
    """Raised for malformed substitution keys or values (e.g. a user key without '_')."""

    pass


class ImageReferenceError(ResolutionError):
    """Raised when a resolved image reference is malformed (missing tag, empty component)."""

    pass


# --- 3. Errors raised by a pipeline step ---
class StepError(ShiplineError):
    """
    Base class for a failed pipeline step.

    Carries the step name, the native failure detail of the external tool
    and its exit status, if it had one.
    """

    step = "step"

    def __init__(self, cause: str, exit_code: int | None = None):
        self.cause = cause
        self.exit_code = exit_code
        super().__init__(f"Step '{self.step}' failed (exit {exit_code}): {cause}")


class BuildStepError(StepError):
    """Raised when the image build (compile or assembly) fails."""

    step = "build"


class PushStepError(StepError):
    """Raised when publishing the image to the registry fails."""

    step = "push"


class DeployStepError(StepError):
    """Raised when the managed platform rejects or fails the deployment."""

    step = "deploy"
