"""
Audit records for label mutations.

Every create, update, delete and publish produces exactly one record,
written synchronously with the mutation it documents.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any
import json
import uuid

from .label import utcnow


class AuditAction(str, Enum):
    """The closed set of auditable label actions."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    PUBLISH = "publish"


@dataclass(frozen=True)
class AuditRecord:
    """Append-only log entry with before/after state of a label."""
    actor: str
    action: AuditAction
    label_id: str
    before: Dict[str, Any] = field(default_factory=dict)
    after: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'actor': self.actor,
            'action': self.action.value,
            'label_id': self.label_id,
            'before': self.before,
            'after': self.after,
            'timestamp': self.timestamp.isoformat(),
        }

    def to_jsonl(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuditRecord':
        return cls(
            id=data['id'],
            actor=data['actor'],
            action=AuditAction(data['action']),
            label_id=data['label_id'],
            before=data.get('before') or {},
            after=data.get('after') or {},
            timestamp=datetime.fromisoformat(data['timestamp']),
        )
