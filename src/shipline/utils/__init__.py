"""
shipline Utils Module

- logger: Logging setup and configuration
- git: Commit identifier lookup for the build context

Usage:
    from shipline.utils import setup_logger, head_commit
"""

from .logger import setup_logger, parse_module_levels
from .git import head_commit
from .typing_compat import override

__all__ = [
    'setup_logger',
    'parse_module_levels',
    'head_commit',
    'override',
]
