"""
Rails environment selection.

``veracode prepare`` boots the application, so it needs a Rails environment
that actually starts. Production is preferred because it carries no
development tooling, but it often needs setup (credentials, databases) that a
source checkout lacks, so development and test are tried next.
"""

from pathlib import Path
from typing import Optional, Sequence

from ..logging_config import get_logger
from ..models import RuntimeProfile, VersionSpec
from ..tools.rvm import PathLike, RvmEnvironment

DEFAULT_BOOT_TIMEOUT = 15.0

# Dependency groups skipped when installing for production
PRODUCTION_EXCLUDED_GROUPS = ('development', 'test')


class EnvironmentProbe:
    """Tries candidate Rails environments in order and keeps the first that boots.

    The boot test is a heuristic: a ``rails server`` that is still running
    when the deadline kills it is taken to be healthy. A server that exits on
    its own, even with status 0, counts as a failure.
    """

    def __init__(self, rvm: RvmEnvironment, boot_timeout: float = DEFAULT_BOOT_TIMEOUT,
                 profiles: Optional[Sequence[RuntimeProfile]] = None, logger=None):
        self.rvm = rvm
        self.boot_timeout = boot_timeout
        self.profiles = list(profiles) if profiles else list(RuntimeProfile)
        self.logger = logger or get_logger('environment_probe')

    def select(self, source_root: PathLike, version: VersionSpec) -> RuntimeProfile:
        """
        Pick the Rails environment to package with.

        Args:
            source_root: Application root directory
            version: Ruby version installed in the gemset

        Returns:
            First profile whose boot test succeeds, otherwise production
        """
        root = Path(source_root)

        for profile in self.profiles:
            self.install_dependencies(root, version, profile)

            if self.boot_test(root, version, profile):
                self.logger.info(f"Successfully verified Rails environment {profile}, using it for Veracode Prepare")
                return profile

            self.logger.info(f"Rails environment {profile} did not boot, trying next candidate")

        self.logger.warning("Testing failed for all known environments, trying our luck with production")
        return RuntimeProfile.PRODUCTION

    def install_dependencies(self, root: Path, version: VersionSpec, profile: RuntimeProfile) -> bool:
        """Bundle install for ``profile``; failures are logged and tolerated."""
        without = PRODUCTION_EXCLUDED_GROUPS if profile is RuntimeProfile.PRODUCTION else ()

        self.logger.info(f"Doing Bundle Install for {profile}")
        result = self.rvm.bundle_install(root, version, without=without)
        if not result.success:
            self.logger.warning("Failed to do bundle install, trying to run server anyway, will probably fail")
            return False
        return True

    def boot_test(self, root: Path, version: VersionSpec, profile: RuntimeProfile) -> bool:
        """Start ``rails server`` under ``profile`` and report whether it stayed up."""
        self.logger.info(f"Running rails server in {profile}")
        result = self.rvm.runner.run_with_deadline(
            self.rvm.do_command(version, 'rails', 'server'),
            self.boot_timeout,
            cwd=str(root),
            env={'RAILS_ENV': profile.value}
        )

        if result.timed_out:
            self.logger.info("Server ran until getting killed, nice!")
            return True

        if result.returncode == 0:
            self.logger.warning("Rails server ran without error? That's unexpected.")
            return False

        self.logger.warning(f"Rails server failed in {profile} with exit code {result.returncode}")
        return False
