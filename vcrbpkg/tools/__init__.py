"""
Tools Module

Wrappers around the external programs the packaging pipeline drives.
"""

from .git import GitClient
from .rvm import RvmEnvironment
from .veracode import VeracodeGem, find_archive, needs_legacy_rubyzip

__all__ = [
    'GitClient',
    'RvmEnvironment',
    'VeracodeGem',
    'find_archive',
    'needs_legacy_rubyzip',
]
