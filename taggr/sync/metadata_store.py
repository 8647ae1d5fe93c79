"""
Client-local sync metadata persistence.

Reads and writes ``.taggr.json``. A missing, unparsable or structurally
invalid file loads as "no metadata"; every write is write-temp-then-rename
so a concurrent reader never sees a partial file.

The overall checksum is recomputed from the stored per-label checksums on
every write, including single-label patches, so it always matches the
entries next to it.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Union

from ..domain import RemoteLabel, SyncMetadata, LabelSyncEntry
from ..errors import MetadataCorruptError
from ..infra import write_json_atomic
from .checksum import label_checksum, checksum_of_entries

logger = logging.getLogger(__name__)

METADATA_FILE = '.taggr.json'


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


class SyncMetadataStore:
    """
    Sync metadata file under the client output directory.

    Example:
        store = SyncMetadataStore(Path("./taggr"))
        store.save(labels, "https://taggr.onrender.com/api")
        metadata = store.load()
    """

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)

    @property
    def path(self) -> Path:
        return self.output_dir / METADATA_FILE

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Optional[SyncMetadata]:
        """Load metadata, or None when there is none usable on disk."""
        if not self.path.exists():
            return None

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return SyncMetadata.from_dict(data)
        except (json.JSONDecodeError, UnicodeDecodeError, MetadataCorruptError) as e:
            logger.warning(f"Ignoring sync metadata at {self.path}: {e}")
        except OSError as e:
            logger.warning(f"Could not read sync metadata at {self.path}: {e}")
        return None

    def _write(self, metadata: SyncMetadata) -> SyncMetadata:
        metadata.overall_checksum = checksum_of_entries(
            {name: entry.checksum for name, entry in metadata.labels.items()}
        )
        write_json_atomic(self.path, metadata.to_dict())
        logger.debug(f"Wrote sync metadata for {len(metadata.labels)} label(s) to {self.path}")
        return metadata

    def save(self, labels: Iterable[RemoteLabel], source_url: str) -> SyncMetadata:
        """Replace the whole record with entries for ``labels``."""
        if not source_url:
            raise ValueError("source_url must be a non-empty string")

        now = _now()
        entries = {}
        for label in labels:
            if not label.name:
                logger.warning(f"Skipping unnamed label in metadata: {label!r}")
                continue
            entries[label.name] = LabelSyncEntry(
                version=label.version,
                synced_at=now,
                checksum=label_checksum(label),
            )

        return self._write(SyncMetadata(synced_at=now, source_url=source_url, labels=entries))

    def patch_one(self, label: RemoteLabel, source_url: str) -> SyncMetadata:
        """Update one label's entry, creating the record if needed."""
        if not label.name:
            raise ValueError("Label must have a name")
        if not source_url:
            raise ValueError("source_url must be a non-empty string")

        now = _now()
        metadata = self.load() or SyncMetadata(synced_at=now, source_url=source_url)
        metadata.labels[label.name] = LabelSyncEntry(
            version=label.version,
            synced_at=now,
            checksum=label_checksum(label),
        )
        metadata.synced_at = now
        metadata.source_url = source_url
        return self._write(metadata)
