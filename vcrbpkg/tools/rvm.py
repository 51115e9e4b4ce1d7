"""
Ruby installation and gemset management with rvm.

All Ruby and Bundler commands for the target application run through
``rvm <version>@<gemset> do ...`` so that the packaging never touches the
system Ruby or its gems.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from ..exceptions import InstallFailedError
from ..logging_config import get_logger
from ..models import ProcessResult, VersionSpec
from ..process import ProcessRunner

PathLike = Union[str, Path]


class RvmEnvironment:
    """Builds and runs commands inside an isolated rvm gemset."""

    def __init__(self, runner: Optional[ProcessRunner] = None, gemset: str = 'veracode',
                 openssl_dir: str = '/usr/local/rvm/usr/', logger=None):
        self.runner = runner or ProcessRunner()
        self.gemset = gemset
        self.openssl_dir = openssl_dir
        self.logger = logger or get_logger('rvm')

    def ruby_string(self, version: VersionSpec) -> str:
        """rvm ruby string selecting the version and gemset, e.g. ``3.2.2@veracode``."""
        return f"{version}@{self.gemset}"

    def do_command(self, version: VersionSpec, *args: str) -> List[str]:
        """Wrap a command so it runs with the gemset's Ruby."""
        return ['rvm', self.ruby_string(version), 'do', *args]

    def run(self, root: PathLike, version: VersionSpec, *args: str,
            env: Optional[Dict[str, str]] = None, capture: bool = True) -> ProcessResult:
        return self.runner.run(self.do_command(version, *args), cwd=str(root), env=env, capture=capture)

    def install_ruby(self, root: PathLike, version: VersionSpec) -> None:
        """
        Install ``version`` with rvm and create the gemset.

        Ruby 2.x is built against rvm's own OpenSSL because current system
        OpenSSL releases are too new for it.

        Raises:
            InstallFailedError: rvm install or gemset creation failed
        """
        if version.major == 2:
            self.logger.info("Installing OpenSSL for RVM")
            result = self.runner.run(['rvm', 'pkg', 'install', 'openssl'], cwd=str(root), capture=False)
            if not result.success:
                self.logger.warning("Failed to install openssl for rvm, continuing with the Ruby install")

            # TODO: take the OpenSSL prefix from the rvm pkg output instead of the configured directory
            install_command = ['rvm', 'install', '--autolibs=disabled',
                               f'--with-openssl-dir={self.openssl_dir}', str(version)]
        else:
            install_command = ['rvm', 'install', str(version)]

        self.logger.info(f"Installing Ruby {version} with RVM")
        result = self.runner.run(install_command, cwd=str(root), capture=False)
        if not result.success:
            self.logger.error(f"Failed to rvm install {version}")
            raise InstallFailedError('rvm install', str(version), reason=f"exit code {result.returncode}")

        self.logger.info(f"Creating gemset '{self.gemset}' for Ruby {version}")
        result = self.runner.run(
            ['rvm', str(version), 'do', 'rvm', 'gemset', 'create', self.gemset],
            cwd=str(root),
            capture=False
        )
        if not result.success:
            self.logger.error(f"Failed to create gemset {self.gemset}")
            raise InstallFailedError('rvm gemset create', str(version), reason=f"exit code {result.returncode}")

    def bundle_install(self, root: PathLike, version: VersionSpec, without: Sequence[str] = ()) -> ProcessResult:
        """Run ``bundle install``, optionally skipping dependency groups."""
        args = ['bundle', 'install']
        if without:
            args += ['--without', *without]
        return self.run(root, version, *args, capture=False)
