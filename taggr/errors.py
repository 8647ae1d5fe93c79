"""
Error taxonomy for taggr.

Validation errors abort a single operation. Registry, scratch-directory and
metadata problems are recoverable and are reported rather than raised past
the component that detects them.
"""

from typing import Optional


class TaggrError(Exception):
    """Base class for all taggr errors."""


class MalformedVersionError(TaggrError, ValueError):
    """Raised when a version is not MAJOR.MINOR.PATCH with non-negative integers."""

    def __init__(self, version):
        super().__init__(f"Malformed version {version!r}: expected MAJOR.MINOR.PATCH")
        self.version = version


class NonMonotonicVersionError(TaggrError, ValueError):
    """Raised when a new version does not sort strictly after the current one."""

    def __init__(self, current: str, proposed: str):
        super().__init__(f"Version {proposed} must be greater than current version {current}")
        self.current = current
        self.proposed = proposed


class LabelNotFoundError(TaggrError, LookupError):
    """Raised when a label does not exist for the given owner."""

    def __init__(self, identifier: str):
        super().__init__(f"Label not found: {identifier}")
        self.identifier = identifier


class LabelConflictError(TaggrError):
    """Raised when a label name is already taken by the same owner."""


class LabelOwnershipError(TaggrError, PermissionError):
    """Raised when an actor tries to mutate a label they do not own."""


class RegistryPublishError(TaggrError):
    """The external publish tool failed. Recoverable: the label stays published internally."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


class ScratchResourceError(TaggrError, OSError):
    """A scratch directory could not be created or removed."""


class MetadataCorruptError(TaggrError, ValueError):
    """The sync metadata file exists but cannot be trusted."""


class NetworkError(TaggrError, ConnectionError):
    """The taggr API could not be reached."""

    REMEDIATION = (
        "Cannot connect to Taggr API. Please check:\n"
        "  1. The API URL is correct (use --url with 'taggr login' if needed)\n"
        "  2. You have an internet connection\n"
        "  3. The server is running and accessible"
    )

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.REMEDIATION)


class ApiError(TaggrError):
    """The taggr API answered with an error envelope or a bad status."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class DriftDetectedWarning(UserWarning):
    """Local label files differ from what was last synced without a version change."""
