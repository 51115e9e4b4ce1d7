"""
Custom exceptions for vcrbpkg.

Only the fatal failure tier is modelled here. Recoverable problems (missing
version files, failed boot tests, unsupported versions) are logged and never
raised.
"""

from typing import List, Optional


class VcrbpkgError(Exception):
    """Base exception class for all vcrbpkg errors."""
    pass


class PrerequisiteMissingError(VcrbpkgError):
    """Raised when a required external tool is missing or broken."""

    def __init__(self, tool: str, hint: Optional[str] = None, reason: Optional[str] = None):
        self.tool = tool
        self.hint = hint
        self.reason = reason

        message = f"Required tool '{tool}' is not available"
        if reason:
            message += f": {reason}"
        if hint:
            message += f". {hint}"

        super().__init__(message)


class CloneFailedError(VcrbpkgError):
    """Raised when cloning the target repository fails."""

    def __init__(self, reference: str, destination: Optional[str] = None, reason: Optional[str] = None):
        self.reference = reference
        self.destination = destination
        self.reason = reason

        message = f"Failed to clone repository '{reference}'"
        if destination:
            message += f" to '{destination}'"
        if reason:
            message += f": {reason}"

        super().__init__(message)


class NotARailsAppError(VcrbpkgError):
    """Raised when the source tree does not have a Rails layout."""

    def __init__(self, path: str, missing: List[str]):
        self.path = path
        self.missing = list(missing)

        message = (f"Directory '{path}' does not have Rails structure, can only package Rails apps "
                   f"(missing: {', '.join(self.missing)})")

        super().__init__(message)


class InstallFailedError(VcrbpkgError):
    """Raised when installing Ruby, the gemset or a required gem fails."""

    def __init__(self, step: str, version: Optional[str] = None, reason: Optional[str] = None):
        self.step = step
        self.version = version
        self.reason = reason

        message = f"Installation step '{step}' failed"
        if version:
            message += f" for Ruby {version}"
        if reason:
            message += f": {reason}"

        super().__init__(message)


class PackagingFailedError(VcrbpkgError):
    """Raised when veracode prepare fails or its artifact cannot be delivered."""

    def __init__(self, message: str, output_path: Optional[str] = None):
        self.output_path = output_path

        if output_path:
            message += f" (output: {output_path})"

        super().__init__(message)


class ConfigurationError(VcrbpkgError):
    """Raised when configuration is invalid."""
    pass
