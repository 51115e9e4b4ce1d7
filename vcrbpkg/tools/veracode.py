"""
Installation and invocation of the veracode packaging gem.
"""

import re
from pathlib import Path
from typing import Optional

from ..exceptions import InstallFailedError, PackagingFailedError
from ..logging_config import get_logger
from ..models import VersionSpec
from .rvm import PathLike, RvmEnvironment

# Any token ending in .zip, optionally quoted
ARCHIVE_PATTERN = re.compile(r"""['"]?([^\s'"]+\.zip)\b""")

# Where the gem writes its archives, relative to the application root
ARCHIVE_GLOB = 'tmp/veracode-*.zip'

# Ruby versions at or below this line need rubyzip 1.x
LEGACY_RUBYZIP_MAX = VersionSpec(2, 4, 0)


def needs_legacy_rubyzip(version: VersionSpec) -> bool:
    """True for Ruby < 2 and Ruby 2.0 through 2.4."""
    return (version.major, version.minor) <= (LEGACY_RUBYZIP_MAX.major, LEGACY_RUBYZIP_MAX.minor)


def find_archive(root: PathLike, output: str = '') -> Optional[Path]:
    """
    Locate the archive produced by ``veracode prepare``.

    The last existing ``*.zip`` path mentioned in the command output wins;
    otherwise the newest ``tmp/veracode-*.zip`` under ``root`` is used.
    """
    root = Path(root)

    for candidate in reversed(ARCHIVE_PATTERN.findall(output or '')):
        path = Path(candidate)
        if not path.is_absolute():
            path = root / path
        if path.is_file():
            return path

    archives = [p for p in root.glob(ARCHIVE_GLOB) if p.is_file()]
    if not archives:
        return None
    return max(archives, key=lambda p: p.stat().st_mtime)


class VeracodeGem:
    """Adds the veracode gem to the application bundle and runs it."""

    def __init__(self, rvm: RvmEnvironment, source: str = 'https://rubygems.org', logger=None):
        self.rvm = rvm
        self.source = source
        self.logger = logger or get_logger('veracode')

    def install(self, root: PathLike, version: VersionSpec) -> None:
        """
        Add the gem (and rubyzip 1.x for old Rubies) to the Gemfile.

        Raises:
            InstallFailedError: bundle add failed
        """
        if needs_legacy_rubyzip(version):
            self.logger.info(f"Ruby version {version} <= 2.4 detected, installing RubyZip 1.0")
            result = self.rvm.run(
                root, version,
                'bundle', 'add', 'rubyzip',
                '--version', '~>1.0',
                '--source', self.source,
                '--skip-install',
                capture=False
            )
            if not result.success:
                self.logger.error("Failed to bundle add rubyzip")
                raise InstallFailedError('bundle add rubyzip', str(version))

        self.logger.info("Checking for existence of 'veracode' gem")
        show_result = self.rvm.run(root, version, 'bundle', 'show', 'veracode')
        if show_result.success:
            self.logger.info(f"Veracode gem already exists, skipping install, output of bundle show: {show_result.output.strip()}")
            return

        self.logger.info(f"bundle show veracode failed, assuming it's not installed yet, output: {show_result.output.strip()}")
        self.logger.info("Installing veracode gem with Bundler")
        result = self.rvm.run(
            root, version,
            'bundle', 'add', 'veracode',
            '--source', self.source,
            '--skip-install',
            capture=False
        )
        if not result.success:
            self.logger.error("Failed to bundle add veracode")
            raise InstallFailedError('bundle add veracode', str(version))

    def prepare(self, root: PathLike, version: VersionSpec, rails_env: str) -> Optional[Path]:
        """
        Run ``veracode prepare -vD`` and return the produced archive, if found.

        Raises:
            PackagingFailedError: the command failed
        """
        self.logger.info("Running Veracode Prepare, this may take a while")
        result = self.rvm.run(root, version, 'veracode', 'prepare', '-vD', env={'RAILS_ENV': rails_env})
        if result.output:
            self.logger.info(result.output)

        if not result.success:
            self.logger.error("Failed to run veracode prepare")
            raise PackagingFailedError(f"veracode prepare failed with exit code {result.returncode}")

        archive = find_archive(root, result.output)
        if archive:
            self.logger.info(f"Veracode archive: {archive}")
        else:
            self.logger.warning(f"veracode prepare succeeded but no archive was found under {root}")
        return archive
