"""
shipline Data Classes

- reference: ImageReference, the per-run image identity
- contexts: VariableNamespace and PipelineContext, the resolved run state
- run: PipelineRun, StepResult and the RunState machine
- scopes: BuildScope and RuntimeScope of the multi-stage image
"""

from .reference import ImageReference
from .contexts import VariableNamespace, PipelineContext
from .run import RunState, StepResult, PipelineRun
from .scopes import BuildScope, RuntimeScope

__all__ = [
    'ImageReference',
    'VariableNamespace',
    'PipelineContext',
    'RunState',
    'StepResult',
    'PipelineRun',
    'BuildScope',
    'RuntimeScope',
]
