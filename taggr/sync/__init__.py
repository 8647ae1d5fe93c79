"""
Client-side synchronisation for taggr.

- checksum: label and label-set digests
- SyncMetadataStore: the .taggr.json record of the last sync
- DriftDetector: spot manual edits to labels.json
- PullClient: fetch labels and write local files
- WatchLoop: poll for remote changes and re-pull
"""

from .checksum import checksum_for, label_checksum, set_checksum
from .metadata_store import SyncMetadataStore, METADATA_FILE
from .drift import DriftDetector, DriftReport, to_camel_case, LABELS_FILE
from .pull_client import PullClient, PullResult, TYPES_FILE
from .watch import WatchLoop, WatchState, LabelDiff, classify_changes, resolve_interval

__all__ = [
    'checksum_for',
    'label_checksum',
    'set_checksum',
    'SyncMetadataStore',
    'METADATA_FILE',
    'DriftDetector',
    'DriftReport',
    'to_camel_case',
    'LABELS_FILE',
    'PullClient',
    'PullResult',
    'TYPES_FILE',
    'WatchLoop',
    'WatchState',
    'LabelDiff',
    'classify_changes',
    'resolve_interval',
]
