"""
shipline Image Builder

- BuildProfile / select_profile: pinned or floating toolchain selection
- MultiStageImage: renders the two-stage Dockerfile of the service
"""

from .profiles import BuildProfile, select_profile
from .image import MultiStageImage

__all__ = [
    'BuildProfile',
    'select_profile',
    'MultiStageImage',
]
