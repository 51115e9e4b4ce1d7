"""
Rails version check.

Asks Bundler which Rails the application resolves to and reports whether
Veracode Static Analysis supports it. The result is informational only.
"""

import re
from typing import Optional

from ..logging_config import get_logger
from ..models import SupportStatus, VersionSpec
from ..tools.rvm import PathLike, RvmEnvironment

# bundle show prints the gem path, e.g. .../gems/rails-6.1.7
RAILS_PATH_PATTERN = re.compile(r'rails-(\d+\.\d+\.\d+)')


def parse_rails_version(output: str) -> Optional[VersionSpec]:
    """Extract the Rails version from ``bundle show rails`` output."""
    match = RAILS_PATH_PATTERN.search(output or '')
    if not match:
        return None
    return VersionSpec.parse(match.group(1))


def classify_rails_version(version: VersionSpec) -> SupportStatus:
    """Rails 3 through 6 and 7.0 are supported."""
    if 3 <= version.major <= 6 or (version.major == 7 and version.minor == 0):
        return SupportStatus.SUPPORTED
    return SupportStatus.UNSUPPORTED


class RailsVersionChecker:
    """Reports the Rails version of an application and whether it is supported."""

    def __init__(self, rvm: RvmEnvironment, logger=None):
        self.rvm = rvm
        self.logger = logger or get_logger('rails_detector')

    def check(self, source_root: PathLike, ruby_version: VersionSpec) -> Optional[SupportStatus]:
        """
        Run ``bundle show rails`` and classify the result.

        Returns:
            SupportStatus, or None when the version could not be determined
        """
        self.logger.info("Detecting Rails version with Bundler")
        result = self.rvm.run(source_root, ruby_version, 'bundle', 'show', 'rails')

        if not result.success:
            self.logger.warning("Failed to run bundle show rails, unable to verify rails version, "
                                "hoping for the best and continuing")
            self.logger.debug(f"bundle show rails output: '{result.output.strip()}'")
            return None

        self.logger.info(f"bundle show rails output: '{result.output.strip()}'")

        rails_version = parse_rails_version(result.output)
        if rails_version is None:
            self.logger.warning("Failed to parse output of bundle show rails, unable to verify rails version, "
                                "hoping for the best and continuing")
            return None

        status = classify_rails_version(rails_version)
        if status is SupportStatus.SUPPORTED:
            self.logger.info(f"Veracode Static Analysis supported Rails version: {rails_version}")
        else:
            self.logger.warning(f"Veracode Static Analysis unsupported Rails version {rails_version}, "
                                f"hoping for the best and continuing")
        return status
