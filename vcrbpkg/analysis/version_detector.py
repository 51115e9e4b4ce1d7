"""
Ruby Version Detection

Determines which Ruby version a Rails application needs by checking, in
priority order, the .ruby-version pin file, its .sample variant, the Gemfile
``ruby`` directive and GitHub Actions workflows. Every source is optional;
when none yields a version the configured default is used.
"""

import re
from pathlib import Path
from typing import Any, Iterator, List, Optional, Union

import yaml

from ..logging_config import get_logger
from ..models import SupportStatus, VersionSpec

PathLike = Union[str, Path]

DEFAULT_RUBY_VERSION = VersionSpec(3, 2, 2)

PIN_FILES = ['.ruby-version', '.ruby-version.sample']
MANIFEST_FILE = 'Gemfile'
WORKFLOW_DIR = Path('.github') / 'workflows'

# `ruby` directive with a full version anywhere on the line, e.g. ruby '~> 3.1.2'
GEMFILE_RUBY_PATTERN = re.compile(r'^ruby\b.*?(\d+)\.(\d+)\.(\d+)', re.ASCII)

# Matrix sub-keys whose entries still describe matrix axes
MATRIX_NESTED_KEYS = ('include',)

# Ruby lines supported by Veracode Static Analysis, as (major, minor)
SUPPORTED_RUBY_LINES = {
    (2, 0), (2, 1),
    (2, 3), (2, 4), (2, 5), (2, 6), (2, 7),
    (3, 0), (3, 1), (3, 2),
}

# Exact legacy releases supported outside the line table
SUPPORTED_RUBY_RELEASES = {VersionSpec(1, 9, 3)}


class VersionDetector:
    """Finds the Ruby version of an application source tree."""

    def __init__(self, default_version: Optional[VersionSpec] = None, logger=None):
        self.default_version = default_version or DEFAULT_RUBY_VERSION
        self.logger = logger or get_logger('version_detector')

    def detect(self, source_root: PathLike) -> VersionSpec:
        """
        Detect the Ruby version required by the application.

        Args:
            source_root: Application root directory

        Returns:
            The first version found, or the default version. Never raises.
        """
        root = Path(source_root)

        # Phase 1-2: pin files (highest confidence)
        for pin_file in PIN_FILES:
            version = self.check_version_file(root / pin_file)
            if version:
                self.logger.info(f"Found Ruby version {version} in {pin_file}")
                return version

        # Phase 3: Gemfile ruby directive
        version = self.check_gemfile(root / MANIFEST_FILE)
        if version:
            self.logger.info(f"Found Ruby version {version} in {MANIFEST_FILE}")
            return version

        # Phase 4: CI configuration
        version = self.check_workflows(root / WORKFLOW_DIR)
        if version:
            self.logger.info(f"Found Ruby version {version} in GitHub workflows")
            return version

        self.logger.warning(f"Unable to find Ruby version, giving it a try with {self.default_version}")
        return self.default_version

    def check_version_file(self, file_path: Path) -> Optional[VersionSpec]:
        """Parse a pin file such as .ruby-version; None when missing or malformed."""
        content = self._read_text(file_path)
        if content is None:
            return None

        content = content.strip()
        if not content:
            self.logger.warning(f"File {file_path} exists but is empty")
            return None

        version = VersionSpec.parse(content)
        if version is None:
            self.logger.warning(f"Unrecognized format in {file_path}: '{content}' does not match x.y.z format")
        return version

    def check_gemfile(self, gemfile_path: Path) -> Optional[VersionSpec]:
        """Scan a Gemfile for a ``ruby`` directive carrying a full version."""
        content = self._read_text(gemfile_path)
        if content is None:
            return None

        for line_number, line in enumerate(content.splitlines(), start=1):
            version = parse_gemfile_ruby_line(line)
            if version:
                self.logger.debug(f"Gemfile line {line_number} declares Ruby {version}")
                return version

        self.logger.info(f"No ruby directive with a full version in {gemfile_path}")
        return None

    def check_workflows(self, workflow_dir: Path) -> Optional[VersionSpec]:
        """Look for a full Ruby version in GitHub Actions workflow files."""
        if not workflow_dir.is_dir():
            self.logger.info(f"Directory does not exist: {workflow_dir}")
            return None

        workflow_files = sorted(
            p for p in workflow_dir.iterdir()
            if p.is_file() and p.suffix in ('.yml', '.yaml')
        )
        for workflow_file in workflow_files:
            content = self._read_text(workflow_file)
            if content is None:
                continue

            try:
                document = yaml.safe_load(content)
            except yaml.YAMLError as e:
                self.logger.warning(f"Unable to parse workflow {workflow_file}: {e}")
                continue

            for value in find_workflow_ruby_versions(document):
                version = VersionSpec.parse(value)
                if version:
                    self.logger.debug(f"Workflow {workflow_file.name} declares Ruby {version}")
                    return version
                self.logger.debug(f"Skipping incomplete Ruby version '{value}' in {workflow_file.name}")

        return None

    def classify_supported(self, version: VersionSpec) -> SupportStatus:
        """
        Check a Ruby version against the Veracode support table.

        Unsupported versions are only reported; packaging continues anyway.
        """
        status = classify_ruby_version(version)
        if status is SupportStatus.SUPPORTED:
            self.logger.info(f"Supported Ruby {version.major}.{version.minor} version {version}")
        else:
            self.logger.warning(f"Ruby version {version} is not supported! Trying anyway...")
        return status

    def _read_text(self, file_path: Path) -> Optional[str]:
        if not file_path.exists():
            self.logger.info(f"File does not exist: {file_path}")
            return None

        try:
            return file_path.read_text(encoding='utf-8', errors='replace')
        except OSError as e:
            self.logger.warning(f"Error reading file {file_path}: {e}")
            return None


def classify_ruby_version(version: VersionSpec) -> SupportStatus:
    if version in SUPPORTED_RUBY_RELEASES or (version.major, version.minor) in SUPPORTED_RUBY_LINES:
        return SupportStatus.SUPPORTED
    return SupportStatus.UNSUPPORTED


def parse_gemfile_ruby_line(line: str) -> Optional[VersionSpec]:
    """Parse a single Gemfile line like ``ruby '~> 3.1.2'``."""
    match = GEMFILE_RUBY_PATTERN.match(line.strip())
    if not match:
        return None
    return VersionSpec.parse('.'.join(match.groups()))


def find_workflow_ruby_versions(node: Any, in_matrix: bool = False) -> Iterator[str]:
    """Yield Ruby version values from a parsed workflow document in document order.

    ``ruby-version`` counts anywhere; a bare ``ruby`` key only inside a
    ``strategy.matrix`` (including its ``include`` entries). Keys whose value
    is not a scalar or a list of scalars are searched like any other node.
    """
    if isinstance(node, dict):
        for key, value in node.items():
            if key == 'ruby-version' or (in_matrix and key == 'ruby'):
                items = _as_list(value)
                if items and all(_is_scalar(item) for item in items):
                    for item in items:
                        yield str(item)
                    continue
            yield from find_workflow_ruby_versions(
                value, in_matrix=key == 'matrix' or (in_matrix and key in MATRIX_NESTED_KEYS))
    elif isinstance(node, list):
        for item in node:
            yield from find_workflow_ruby_versions(item, in_matrix)


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else [value]
