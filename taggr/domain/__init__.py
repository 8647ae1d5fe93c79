"""
Domain layer for taggr.

Contains pure domain objects with no I/O or side effects:
- Label / VersionEntry: server-side label and its immutable history
- RemoteLabel: label state as received by the client
- AuditRecord / AuditAction: append-only mutation log
- SyncMetadata / LabelSyncEntry: client-local sync record
- PackageArtifactSet: files generated for one publish
"""

from .label import Label, VersionEntry, RemoteLabel, make_package_name, DEFAULT_VERSION
from .audit import AuditRecord, AuditAction
from .sync import SyncMetadata, LabelSyncEntry
from .artifact import PackageArtifactSet

__all__ = [
    'Label',
    'VersionEntry',
    'RemoteLabel',
    'make_package_name',
    'DEFAULT_VERSION',
    'AuditRecord',
    'AuditAction',
    'SyncMetadata',
    'LabelSyncEntry',
    'PackageArtifactSet',
]
