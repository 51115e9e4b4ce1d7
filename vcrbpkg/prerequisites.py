#!/usr/bin/env python3
"""
Prerequisites checker for vcrbpkg.
"""

from typing import Dict, List, Optional, Sequence

from .exceptions import PrerequisiteMissingError
from .logging_config import get_logger
from .process import ProcessRunner


class PrerequisiteChecker:
    """Check that the external tools the packaging pipeline drives are installed."""

    # Command used to confirm each tool actually runs, not just that it is on PATH
    VERSION_COMMANDS = {
        'ruby': ['ruby', '--version'],
        'rvm': ['rvm', 'version'],
        'git': ['git', '--version'],
    }

    INSTALLATION_INSTRUCTIONS = {
        'ruby': 'Install Ruby: brew install ruby (macOS) or apt-get install ruby (Ubuntu)',
        'rvm': 'RVM may not be available, please install with: curl -sSL https://get.rvm.io | bash',
        'git': 'Install git: brew install git (macOS) or apt-get install git (Ubuntu)',
    }

    def __init__(self, runner: Optional[ProcessRunner] = None, logger=None):
        self.runner = runner or ProcessRunner()
        self.logger = logger or get_logger('prerequisites')

    def ensure_tools(self, tools: Sequence[str]) -> Dict[str, str]:
        """
        Verify every tool is on PATH and answers its version command.

        Args:
            tools: Tool names, e.g. ['ruby', 'rvm']

        Returns:
            Mapping of tool name to its reported version output

        Raises:
            PrerequisiteMissingError: On the first tool that is missing or broken
        """
        versions = {}
        for tool in tools:
            versions[tool] = self.ensure_tool(tool)
        return versions

    def ensure_tool(self, tool: str) -> str:
        """Check a single tool and return its version output."""
        path = self.runner.which(tool)
        if not path:
            self.logger.error(f"Unable to find {tool} command on PATH")
            raise PrerequisiteMissingError(tool, hint=self.get_hint(tool), reason="not found on PATH")

        self.logger.info(f"{tool} is available at {path}")

        command = self.VERSION_COMMANDS.get(tool, [tool, '--version'])
        result = self.runner.run(command, timeout=60)
        if not result.success:
            self.logger.error(f"Unable to run {' '.join(command)} command: {result.output.strip()}")
            raise PrerequisiteMissingError(
                tool,
                hint=self.get_hint(tool),
                reason=f"'{' '.join(command)}' failed, please ensure {tool} is installed correctly"
            )

        version_output = result.output.strip()
        self.logger.info(f"{tool} version: {version_output}")
        return version_output

    def get_hint(self, tool: str) -> str:
        return self.INSTALLATION_INSTRUCTIONS.get(tool, f"Please install {tool}")

    def get_installation_instructions(self, missing_tools: List[str]) -> str:
        """Get installation instructions for missing tools."""
        result = "Missing prerequisites installation instructions:\n"
        for tool in missing_tools:
            result += f"  {tool}: {self.get_hint(tool)}\n"

        return result
