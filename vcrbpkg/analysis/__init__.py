"""
Analysis Module

Contains Ruby version detection, Rails version checks and Rails environment
selection.
"""

from .environment_probe import EnvironmentProbe
from .rails_detector import RailsVersionChecker, classify_rails_version, parse_rails_version
from .version_detector import DEFAULT_RUBY_VERSION, VersionDetector, classify_ruby_version

__all__ = [
    'DEFAULT_RUBY_VERSION',
    'EnvironmentProbe',
    'RailsVersionChecker',
    'VersionDetector',
    'classify_rails_version',
    'classify_ruby_version',
    'parse_rails_version',
]
