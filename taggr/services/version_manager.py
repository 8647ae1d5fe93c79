"""
Version management for labels.

Handles semantic version bumping, appending immutable version entries and
building the audit records that document label mutations.

Label versions are strict MAJOR.MINOR.PATCH with non-negative integers; no
pre-release or build suffixes.
"""

import re
from typing import Optional, Tuple, Dict, Any

from packaging.version import Version

from ..domain import Label, VersionEntry, AuditRecord, AuditAction
from ..domain.label import utcnow
from ..errors import MalformedVersionError, NonMonotonicVersionError

SEMVER_PATTERN = re.compile(r'^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$')

BUMP_KINDS = ('major', 'minor', 'patch')


def parse_version(version_str) -> Tuple[int, int, int]:
    """
    Split a version into its three integer components.

    Raises:
        MalformedVersionError: if the version is not MAJOR.MINOR.PATCH
    """
    if not isinstance(version_str, str):
        raise MalformedVersionError(version_str)
    match = SEMVER_PATTERN.match(version_str.strip())
    if not match:
        raise MalformedVersionError(version_str)
    major, minor, patch = (int(part) for part in match.groups())
    return major, minor, patch


def is_valid_version(version_str) -> bool:
    try:
        parse_version(version_str)
    except MalformedVersionError:
        return False
    return True


class VersionBumper:
    """Bump semantic versions."""

    @staticmethod
    def bump_major(version_str: str) -> str:
        """Bump major version (X.0.0)."""
        major, _, _ = parse_version(version_str)
        return f"{major + 1}.0.0"

    @staticmethod
    def bump_minor(version_str: str) -> str:
        """Bump minor version (x.Y.0)."""
        major, minor, _ = parse_version(version_str)
        return f"{major}.{minor + 1}.0"

    @staticmethod
    def bump_patch(version_str: str) -> str:
        """Bump patch version (x.y.Z)."""
        major, minor, patch = parse_version(version_str)
        return f"{major}.{minor}.{patch + 1}"


def bump(version_str: str, kind: str = 'patch') -> str:
    """Bump ``version_str`` by ``kind`` (major, minor or patch).

    Args:
        version_str: Current MAJOR.MINOR.PATCH version
        kind: Which component to increment

    Returns:
        The new version string

    Raises:
        MalformedVersionError: for an invalid version
        ValueError: for an unknown bump kind
    """
    bumper = VersionBumper()
    if kind == 'major':
        return bumper.bump_major(version_str)
    elif kind == 'minor':
        return bumper.bump_minor(version_str)
    elif kind == 'patch':
        return bumper.bump_patch(version_str)
    raise ValueError(f"Unknown bump kind {kind!r}; expected one of {', '.join(BUMP_KINDS)}")


def is_newer(candidate: str, current: str) -> bool:
    """True when ``candidate`` sorts strictly after ``current``."""
    parse_version(candidate)
    parse_version(current)
    return Version(candidate) > Version(current)


def build_audit_record(
    actor: str,
    action: AuditAction,
    label: Label,
    before: Optional[Dict[str, Any]] = None,
    after: Optional[Dict[str, Any]] = None,
) -> AuditRecord:
    """Create an audit record for a mutation of ``label``."""
    return AuditRecord(
        actor=actor,
        action=action,
        label_id=label.id,
        before=before or {},
        after=after or {},
    )


def append_version_entry(
    label: Label,
    new_version: str,
    changelog: str,
    value: str,
    actor: Optional[str] = None,
) -> Tuple[VersionEntry, AuditRecord]:
    """
    Append a version entry to ``label`` and mark it published.

    The prior history entry is the audit record's "before" state; when the
    label has never been published the previous version alone is recorded.

    Args:
        label: Label to mutate in place
        new_version: Version to publish; must be greater than label.version
        changelog: Human-readable change description
        value: Value snapshot stored in the entry
        actor: Who performs the publish (defaults to the label owner)

    Returns:
        (entry, publish audit record)

    Raises:
        MalformedVersionError: if either version is malformed
        NonMonotonicVersionError: if new_version does not exceed label.version
    """
    if not is_newer(new_version, label.version):
        raise NonMonotonicVersionError(label.version, new_version)

    prior = label.latest_entry
    # History may be older than label.version only if it was never published
    if prior is not None and not is_newer(new_version, prior.version):
        raise NonMonotonicVersionError(prior.version, new_version)

    before = prior.to_dict() if prior is not None else {'version': label.version}

    entry = VersionEntry(
        version=new_version,
        value=value,
        changelog=changelog,
        published_at=utcnow(),
    )
    label.versions.append(entry)
    label.version = new_version
    label.is_published = True
    label.touch()

    record = build_audit_record(
        actor or label.owner_id,
        AuditAction.PUBLISH,
        label,
        before=before,
        after=entry.to_dict(),
    )
    return entry, record
