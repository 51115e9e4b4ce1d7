"""
Packaging pipeline.

Sequences the external tools needed to turn a Rails source tree into a
Veracode upload archive:

    prerequisites -> source checkout -> Rails layout check -> Ruby version
    -> rvm install -> Rails version check -> veracode gem -> environment
    probe -> veracode prepare -> copy archive

Steps that can only degrade the result log a warning and continue; the rest
raise a VcrbpkgError subclass and abort the run.
"""

import os
import shutil
from pathlib import Path
from typing import List, Optional

from .analysis import EnvironmentProbe, RailsVersionChecker, VersionDetector
from .config import Config
from .exceptions import NotARailsAppError, PackagingFailedError
from .logging_config import get_logger
from .models import PackageResult
from .prerequisites import PrerequisiteChecker
from .process import ProcessRunner
from .tools import GitClient, RvmEnvironment, VeracodeGem

# Entries every Rails application root contains
RAILS_STRUCTURE = ['app', 'config', 'public', 'Gemfile']

REQUIRED_TOOLS = ['ruby', 'rvm']


def is_directory(path: str, logger=None) -> bool:
    logger = logger or get_logger('packager')
    if not os.path.exists(path):
        logger.info(f"Input {path} does not exist.")
        return False
    if os.path.isdir(path):
        logger.info(f"{path} is a valid directory.")
        return True
    logger.info(f"{path} is not a directory.")
    return False


def missing_rails_entries(root: Path) -> List[str]:
    """Names from RAILS_STRUCTURE that are absent under ``root``."""
    return [name for name in RAILS_STRUCTURE if not (root / name).exists()]


class Packager:
    """Runs the full packaging pipeline for one application."""

    def __init__(self, config: Optional[Config] = None, runner: Optional[ProcessRunner] = None, logger=None):
        self.config = config or Config()
        self.runner = runner or ProcessRunner()
        self.logger = logger or get_logger('packager')

        self.prerequisites = PrerequisiteChecker(self.runner)
        self.git = GitClient(self.runner, depth=self.config.packaging.clone_depth)
        self.rvm = RvmEnvironment(self.runner, gemset=self.config.ruby.gemset,
                                  openssl_dir=self.config.ruby.openssl_dir)
        self.detector = VersionDetector(default_version=self.config.default_ruby_version)
        self.rails_checker = RailsVersionChecker(self.rvm)
        self.gem = VeracodeGem(self.rvm, source=self.config.packaging.gem_source)
        self.probe = EnvironmentProbe(self.rvm, boot_timeout=float(self.config.probe.boot_timeout),
                                      profiles=self.config.probe_profiles)

    def package(self, target: str, out_file: Optional[str] = None) -> PackageResult:
        """
        Package the application at ``target`` (a directory or a git URL).

        Args:
            target: Local directory or repository reference
            out_file: Optional path the produced archive is copied to

        Returns:
            PackageResult describing the run

        Raises:
            VcrbpkgError: Any fatal step failed
        """
        self.prerequisites.ensure_tools(REQUIRED_TOOLS)

        source_dir = self.resolve_source(target)
        self.ensure_rails_structure(source_dir)

        ruby_version = self.detector.detect(source_dir)
        self.detector.classify_supported(ruby_version)

        self.rvm.install_ruby(source_dir, ruby_version)
        self.rails_checker.check(source_dir, ruby_version)
        self.gem.install(source_dir, ruby_version)

        rails_env = self.probe.select(source_dir, ruby_version)

        artifact = self.gem.prepare(source_dir, ruby_version, rails_env.value)

        result = PackageResult(source_dir=source_dir, ruby_version=ruby_version,
                               rails_env=rails_env, artifact=artifact)
        if out_file:
            result.output_file = self.copy_artifact(artifact, Path(out_file))

        self.logger.info("All done!")
        return result

    def resolve_source(self, target: str) -> Path:
        """Use ``target`` as is when it is a directory, otherwise clone it."""
        if is_directory(target, self.logger):
            return Path(target)
        self.prerequisites.ensure_tools(['git'])
        return self.git.clone(target)

    def ensure_rails_structure(self, source_dir: Path) -> None:
        missing = missing_rails_entries(source_dir)
        if missing:
            self.logger.error(f"Directory does not have Rails structure, not found: {', '.join(missing)}")
            raise NotARailsAppError(str(source_dir), missing)

    def copy_artifact(self, artifact: Optional[Path], out_file: Path) -> Path:
        if artifact is None:
            raise PackagingFailedError("No archive was produced to copy", output_path=str(out_file))

        try:
            if not out_file.parent.exists():
                out_file.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(artifact, out_file)
        except OSError as e:
            self.logger.error(f"Error copying {artifact} to {out_file}: {e}")
            raise PackagingFailedError(f"Error copying archive {artifact}: {e}", output_path=str(out_file))

        self.logger.info(f"Copied archive to {out_file}")
        return out_file
