"""
Core data models for vcrbpkg.
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional


# Leading major.minor.patch triple; anything after the third group is ignored
VERSION_PATTERN = re.compile(r'^(\d+)\.(\d+)\.(\d+)', re.ASCII)


@dataclass(frozen=True, order=True)
class VersionSpec:
    """A three-part version number such as a Ruby or Rails release.

    Instances are immutable and ordered by (major, minor, patch). An unknown
    version is represented by ``None``, never by ``VersionSpec(0, 0, 0)``.
    """
    major: int
    minor: int
    patch: int

    def __post_init__(self):
        for name in ('major', 'minor', 'patch'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Version {name} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"Version {name} must be non-negative, got {value}")

    @classmethod
    def parse(cls, text: Optional[str]) -> Optional['VersionSpec']:
        """
        Parse the leading ``major.minor.patch`` triple of a string.

        Args:
            text: Text such as "3.2.2", "3.2.2-rc1" or "2.7.6\\n"

        Returns:
            VersionSpec, or None when no complete triple starts the text
        """
        if not text:
            return None

        match = VERSION_PATTERN.match(text.strip())
        if not match:
            return None

        try:
            major, minor, patch = (int(group) for group in match.groups())
        except ValueError:
            return None

        return cls(major, minor, patch)

    def compare(self, other: 'VersionSpec') -> int:
        """Three-way comparison: -1, 0 or 1."""
        return compare_versions(self, other)

    def to_string(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def __str__(self) -> str:
        return self.to_string()


def compare_versions(version1: VersionSpec, version2: VersionSpec) -> int:
    """
    Compare two versions on (major, minor, patch), in that priority order.

    Args:
        version1: First version
        version2: Second version

    Returns:
        -1 if version1 < version2, 0 if equal, 1 if version1 > version2
    """
    v1_parts = (version1.major, version1.minor, version1.patch)
    v2_parts = (version2.major, version2.minor, version2.patch)

    for i in range(3):
        if v1_parts[i] < v2_parts[i]:
            return -1
        elif v1_parts[i] > v2_parts[i]:
            return 1

    return 0


class RuntimeProfile(Enum):
    """Rails environments, declared in the order they are tried."""
    PRODUCTION = "production"
    DEVELOPMENT = "development"
    TEST = "test"

    def __str__(self) -> str:
        return self.value


class SupportStatus(Enum):
    """Whether Veracode Static Analysis supports a Ruby or Rails version."""
    SUPPORTED = "supported"
    UNSUPPORTED = "unsupported"


@dataclass
class ProcessResult:
    """Outcome of one external process invocation."""
    args: List[str]
    returncode: Optional[int]  # None when the process was killed
    output: str = ""           # combined stdout and stderr, empty when streamed
    timed_out: bool = False
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return not self.timed_out and self.returncode == 0

    @property
    def command(self) -> str:
        return ' '.join(self.args)


@dataclass
class PackageResult:
    """Result of a complete packaging run."""
    source_dir: Path
    ruby_version: VersionSpec
    rails_env: RuntimeProfile
    artifact: Optional[Path] = None
    output_file: Optional[Path] = None
