"""
Client-local sync metadata.

SyncMetadata records what was last pulled from the server and the checksums
needed to spot drift. It is owned by the client process and serialised to
``.taggr.json`` next to the generated label files.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional

from ..errors import MetadataCorruptError


@dataclass(frozen=True)
class LabelSyncEntry:
    """Per-label sync state."""
    version: str
    synced_at: str
    checksum: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'syncedAt': self.synced_at,
            'checksum': self.checksum,
        }

    @classmethod
    def from_dict(cls, name: str, data: Any) -> 'LabelSyncEntry':
        if not isinstance(data, dict):
            raise MetadataCorruptError(f"Entry for label {name!r} is not an object")
        version = data.get('version')
        checksum = data.get('checksum')
        synced_at = data.get('syncedAt', '')
        if not isinstance(version, str) or not isinstance(checksum, str) or not isinstance(synced_at, str):
            raise MetadataCorruptError(f"Entry for label {name!r} has invalid fields")
        return cls(version=version, synced_at=synced_at, checksum=checksum)


@dataclass
class SyncMetadata:
    """Whole-file sync record."""
    synced_at: str
    source_url: str
    labels: Dict[str, LabelSyncEntry] = field(default_factory=dict)
    overall_checksum: str = ""

    def versions(self) -> Dict[str, str]:
        """Map of label name to last-synced version."""
        return {name: entry.version for name, entry in self.labels.items()}

    def get(self, name: str) -> Optional[LabelSyncEntry]:
        return self.labels.get(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'syncedAt': self.synced_at,
            'sourceUrl': self.source_url,
            'labels': {name: entry.to_dict() for name, entry in sorted(self.labels.items())},
            'overallChecksum': self.overall_checksum,
        }

    @classmethod
    def from_dict(cls, data: Any) -> 'SyncMetadata':
        """
        Validate and build metadata from parsed JSON.

        Raises:
            MetadataCorruptError: if the structure is not a metadata record
        """
        if not isinstance(data, dict):
            raise MetadataCorruptError("Metadata is not a JSON object")

        synced_at = data.get('syncedAt')
        # Files written by older clients used "apiUrl"
        source_url = data.get('sourceUrl', data.get('apiUrl'))
        labels = data.get('labels')

        if not isinstance(synced_at, str) or not isinstance(source_url, str) or not isinstance(labels, dict):
            raise MetadataCorruptError("Metadata has invalid structure")

        overall = data.get('overallChecksum', '')
        if not isinstance(overall, str):
            raise MetadataCorruptError("Metadata has invalid overall checksum")

        return cls(
            synced_at=synced_at,
            source_url=source_url,
            labels={name: LabelSyncEntry.from_dict(name, entry) for name, entry in labels.items()},
            overall_checksum=overall,
        )
