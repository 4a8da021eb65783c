"""
shipline Steps

- Step: abstract base of a pipeline step
- BuildStep, PushStep: container runtime and registry steps
- DeployStep: managed platform step
"""

from .base import Step
from .docker import BuildStep, PushStep
from .deploy import DeployStep

__all__ = [
    'Step',
    'BuildStep',
    'PushStep',
    'DeployStep',
]
