"""
Content checksums for synced labels.

A label's checksum is SHA-256 over ``name:value:version``; a set checksum is
SHA-256 over the per-label checksums joined with '|' in name order, so it
does not depend on the order labels arrive in.
"""

import hashlib
from typing import Iterable, Mapping

from ..domain import RemoteLabel, DEFAULT_VERSION


def sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode('utf-8')).hexdigest()


def checksum_for(name: str, value, version: str) -> str:
    """Checksum of one label's identity, content and version."""
    value = '' if value is None else str(value)
    return sha256_hex(f"{name or ''}:{value}:{version or DEFAULT_VERSION}")


def label_checksum(label: RemoteLabel) -> str:
    return checksum_for(label.name, label.value, label.version)


def checksum_of_entries(checksums: Mapping[str, str]) -> str:
    """Set checksum from a name -> per-label checksum mapping."""
    return sha256_hex('|'.join(checksums[name] for name in sorted(checksums)))


def set_checksum(labels: Iterable[RemoteLabel]) -> str:
    """Order-independent checksum of a label set. Unnamed labels are ignored."""
    return checksum_of_entries({label.name: label_checksum(label) for label in labels if label.name})
