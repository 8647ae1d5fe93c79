"""
Drift detection for locally synced labels.

Drift is a local value whose checksum no longer matches the one recorded at
the last sync while the label's version is unchanged. A version change
explains a different checksum and is not drift.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..domain import RemoteLabel
from .checksum import checksum_for
from .metadata_store import SyncMetadataStore

logger = logging.getLogger(__name__)

LABELS_FILE = 'labels.json'

# Reasons listed in full before the rest are summarised
MAX_REASONS = 3


def to_camel_case(name: str) -> str:
    """
    Key used for a label in labels.json.

    ``welcome-message`` -> ``welcomeMessage``. Characters outside
    ``[A-Za-z0-9-]`` are dropped and a leading capital is lowered.
    """
    if not name or not isinstance(name, str):
        return ''
    key = re.sub(r'[^a-zA-Z0-9-]', '', name)
    key = re.sub(r'-([a-z])', lambda m: m.group(1).upper(), key)
    return re.sub(r'^[A-Z]', lambda m: m.group(0).lower(), key)


@dataclass
class DriftReport:
    """Outcome of a drift check."""
    is_edited: bool
    reason: Optional[str] = None
    labels: List[str] = field(default_factory=list)


class DriftDetector:
    """Compare labels.json against sync metadata and the fetched remote state."""

    def __init__(self, output_dir: Union[str, Path], metadata_store: Optional[SyncMetadataStore] = None):
        self.output_dir = Path(output_dir)
        self.metadata_store = metadata_store or SyncMetadataStore(self.output_dir)

    @property
    def labels_path(self) -> Path:
        return self.output_dir / LABELS_FILE

    def detect(self, remote_labels: Iterable[RemoteLabel]) -> DriftReport:
        metadata = self.metadata_store.load()
        if metadata is None:
            return DriftReport(is_edited=False)

        if not self.labels_path.exists():
            return DriftReport(is_edited=False)

        try:
            with open(self.labels_path, 'r', encoding='utf-8') as f:
                local = json.load(f)
            if not isinstance(local, dict):
                raise ValueError("labels file is not a JSON object")
        except (OSError, ValueError) as e:
            logger.debug(f"Could not parse {self.labels_path}: {e}")
            return DriftReport(
                is_edited=True,
                reason='Could not verify label integrity - file may be corrupted or manually edited',
            )

        remote_by_name = {label.name: label for label in remote_labels if label.name}
        edited = []
        for name, entry in sorted(metadata.labels.items()):
            remote = remote_by_name.get(name)
            if remote is None:
                continue
            key = to_camel_case(name)
            if key not in local:
                continue
            if entry.version != remote.version:
                continue
            if checksum_for(name, local[key], remote.version) != entry.checksum:
                edited.append(name)

        if not edited:
            return DriftReport(is_edited=False)

        reasons = [f'"{name}" has been modified' for name in edited]
        reason = '; '.join(reasons[:MAX_REASONS])
        if len(reasons) > MAX_REASONS:
            reason += f" (and {len(reasons) - MAX_REASONS} more)"
        return DriftReport(is_edited=True, reason=reason, labels=edited)
