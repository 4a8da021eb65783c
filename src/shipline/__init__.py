"""
shipline

Builds a service image from source, publishes it under a commit-derived tag
and deploys exactly that image to Cloud Run, as one fail-fast run.

Main modules:
- config: Configuration loading and validation
- substitute: Variable namespace and `$VAR` / `${VAR}` expansion
- images: Build profiles and the multi-stage Dockerfile
- steps: The build, push and deploy steps
- backends: docker (python-on-whales) and gcloud invocations
- pipeline: The step sequencer
- datacls: Image reference, run context and run record
- utils: Logging and git helpers

Quick start example:
```python
from shipline import Config, Pipeline, WhalesBackend, GcloudBackend

config = Config("shipline.yml")
pipeline = Pipeline(config, WhalesBackend(), GcloudBackend(), commit="abc123")
run = pipeline.run()
print(run.outcome, run.images)
```
"""

__version__ = "0.3.0"

from .config import Config, PipelineConfigModel
from .datacls import ImageReference, PipelineRun, RunState
from .images import BuildProfile, MultiStageImage
from .backends import WhalesBackend, GcloudBackend
from .pipeline import Pipeline, write_manifest
from .exceptions import (
    ShiplineError,
    ConfigurationError,
    ConfigValidationError,
    ResolutionError,
    StepError,
)

__all__ = [
    # Version
    '__version__',
    # Config
    'Config',
    'PipelineConfigModel',
    # Data classes
    'ImageReference',
    'PipelineRun',
    'RunState',
    # Images
    'BuildProfile',
    'MultiStageImage',
    # Backends
    'WhalesBackend',
    'GcloudBackend',
    # Pipeline
    'Pipeline',
    'write_manifest',
    # Exceptions
    'ShiplineError',
    'ConfigurationError',
    'ConfigValidationError',
    'ResolutionError',
    'StepError',
]
