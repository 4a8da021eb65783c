"""
shipline Backends

- WhalesBackend: docker build/push through python-on-whales
- GcloudBackend: Cloud Run deploy through the gcloud CLI
"""

from .docker import WhalesBackend
from .gcloud import GcloudBackend, deploy_command

__all__ = [
    'WhalesBackend',
    'GcloudBackend',
    'deploy_command',
]
