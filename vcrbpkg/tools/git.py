"""
Repository cloning with git.
"""

import tempfile
from pathlib import Path
from typing import Optional

from ..exceptions import CloneFailedError, PrerequisiteMissingError
from ..logging_config import get_logger
from ..process import ProcessRunner


class GitClient:
    """Shallow-clones a repository into a fresh temporary directory."""

    TEMP_PREFIX = 'vcrbpkg'

    def __init__(self, runner: Optional[ProcessRunner] = None, depth: int = 1, logger=None):
        self.runner = runner or ProcessRunner()
        self.depth = depth
        self.logger = logger or get_logger('git')

    def clone(self, reference: str) -> Path:
        """
        Clone ``reference`` and return the checkout directory.

        Raises:
            PrerequisiteMissingError: git is not installed
            CloneFailedError: the temporary directory or the clone itself failed
        """
        if not self.runner.which('git'):
            self.logger.error("git is not installed")
            raise PrerequisiteMissingError('git', hint="git is not installed, please install git")

        temp_root = tempfile.gettempdir()
        try:
            destination = tempfile.mkdtemp(prefix=self.TEMP_PREFIX, dir=temp_root)
        except OSError as e:
            self.logger.error(f"Error creating temporary directory in '{temp_root}' with prefix '{self.TEMP_PREFIX}'")
            raise CloneFailedError(reference, reason=f"cannot create temporary directory: {e}")

        self.logger.info(f"Temporary directory: {destination}")
        self.logger.info(f"Cloning repository from {reference}...")

        result = self.runner.run(
            ['git', 'clone', '--depth', str(self.depth), reference, destination],
            capture=False
        )
        if not result.success:
            self.logger.error(f"Failed to clone repository '{reference}' to '{destination}'")
            raise CloneFailedError(reference, destination, reason=f"git exited with code {result.returncode}")

        self.logger.info(f"Repository cloned successfully at '{destination}'.")
        return Path(destination)
