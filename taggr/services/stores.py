"""
Label and audit persistence collaborators.

The label service only depends on the LabelStore and AuditLog protocols.
In-memory implementations back tests and embedding; the JSON
implementations persist through FileStore and an append-only JSONL file.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Protocol, Optional, List, Dict

from ..domain import Label, AuditRecord
from ..infra import FileStore

logger = logging.getLogger(__name__)


class LabelStore(Protocol):
    def get(self, owner_id: str, label_id: str) -> Optional[Label]: ...
    def find_by_name(self, owner_id: str, name: str) -> Optional[Label]: ...
    def list(self, owner_id: str) -> List[Label]: ...
    def save(self, label: Label) -> None: ...
    def delete(self, owner_id: str, label_id: str) -> bool: ...


class AuditLog(Protocol):
    def append(self, record: AuditRecord) -> None: ...
    def records_for(self, label_id: str) -> List[AuditRecord]: ...


class InMemoryLabelStore:
    """Dictionary-backed label store; stores detached copies."""

    def __init__(self):
        self._labels: Dict[str, Label] = {}
        self._lock = threading.Lock()

    def get(self, owner_id: str, label_id: str) -> Optional[Label]:
        with self._lock:
            label = self._labels.get(label_id)
            if label is None or label.owner_id != owner_id:
                return None
            return Label.from_dict(label.to_dict())

    def find_by_name(self, owner_id: str, name: str) -> Optional[Label]:
        with self._lock:
            for label in self._labels.values():
                if label.owner_id == owner_id and label.name == name:
                    return Label.from_dict(label.to_dict())
        return None

    def list(self, owner_id: str) -> List[Label]:
        with self._lock:
            return [Label.from_dict(l.to_dict()) for l in self._labels.values() if l.owner_id == owner_id]

    def save(self, label: Label) -> None:
        with self._lock:
            self._labels[label.id] = Label.from_dict(label.to_dict())

    def delete(self, owner_id: str, label_id: str) -> bool:
        with self._lock:
            label = self._labels.get(label_id)
            if label is None or label.owner_id != owner_id:
                return False
            del self._labels[label_id]
            return True


class JsonLabelStore:
    """Label store persisted as one JSON object keyed by label id."""

    def __init__(self, path: Path):
        self.store = FileStore(path)

    def _load(self, data) -> Optional[Label]:
        try:
            return Label.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping unreadable label record in {self.store.path}: {e}")
            return None

    def get(self, owner_id: str, label_id: str) -> Optional[Label]:
        data = self.store.get(label_id)
        label = self._load(data) if data else None
        if label is None or label.owner_id != owner_id:
            return None
        return label

    def find_by_name(self, owner_id: str, name: str) -> Optional[Label]:
        for label in self.list(owner_id):
            if label.name == name:
                return label
        return None

    def list(self, owner_id: str) -> List[Label]:
        labels = (self._load(data) for data in self.store.values())
        return [l for l in labels if l is not None and l.owner_id == owner_id]

    def save(self, label: Label) -> None:
        self.store.set(label.id, label.to_dict())

    def delete(self, owner_id: str, label_id: str) -> bool:
        if self.get(owner_id, label_id) is None:
            return False
        return self.store.delete(label_id)


class InMemoryAuditLog:
    """Append-only list of audit records."""

    def __init__(self):
        self.records: List[AuditRecord] = []
        self._lock = threading.Lock()

    def append(self, record: AuditRecord) -> None:
        with self._lock:
            self.records.append(record)

    def records_for(self, label_id: str) -> List[AuditRecord]:
        with self._lock:
            return [r for r in self.records if r.label_id == label_id]


class JsonlAuditLog:
    """Append-only audit log, one JSON record per line."""

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def append(self, record: AuditRecord) -> None:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'a', encoding='utf-8') as f:
                f.write(record.to_jsonl() + '\n')

    def records_for(self, label_id: str) -> List[AuditRecord]:
        if not self.path.exists():
            return []
        records = []
        with open(self.path, 'r', encoding='utf-8') as f:
            for line_no, line in enumerate(f, 1):
                if not line.strip():
                    continue
                try:
                    record = AuditRecord.from_dict(json.loads(line))
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.warning(f"Skipping bad audit line {line_no} in {self.path}: {e}")
                    continue
                if record.label_id == label_id:
                    records.append(record)
        return records
