"""
Label domain objects for taggr.

Label is the server-side source of truth: a named, owned, versioned text
value with an append-only version history. RemoteLabel is the read-only view
a client receives from the API.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
import copy
import uuid


DEFAULT_VERSION = "1.0.0"


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


def _parse_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if value:
        return datetime.fromisoformat(value)
    return utcnow()


@dataclass(frozen=True)
class VersionEntry:
    """Immutable snapshot of a label's value at a published version."""
    version: str
    value: str
    changelog: str = ""
    published_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'value': self.value,
            'changelog': self.changelog,
            'published_at': self.published_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VersionEntry':
        return cls(
            version=data['version'],
            value=data.get('value', ''),
            changelog=data.get('changelog', ''),
            published_at=_parse_datetime(data.get('published_at')),
        )


def make_package_name(owner_id: str, name: str) -> str:
    """Registry package name for a label: ``@<owner>/<label-name>``."""
    return f"@{owner_id}/{name}"


@dataclass
class Label:
    """
    A named, owned, versioned text value.

    ``versions`` is append-only and only grows through the version manager;
    its last entry always carries ``version``.
    """
    owner_id: str
    name: str
    display_name: str
    value: str
    description: str = ""
    category: str = "general"
    tags: List[str] = field(default_factory=list)
    version: str = DEFAULT_VERSION
    is_published: bool = False
    is_private: bool = True
    package_name: str = ""
    package_id: str = ""
    downloads: int = 0
    usage_count: int = 0
    versions: List[VersionEntry] = field(default_factory=list)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        if not self.package_name:
            self.package_name = make_package_name(self.owner_id, self.name)

    @property
    def latest_entry(self) -> Optional[VersionEntry]:
        return self.versions[-1] if self.versions else None

    def touch(self) -> None:
        self.updated_at = utcnow()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'owner_id': self.owner_id,
            'name': self.name,
            'display_name': self.display_name,
            'value': self.value,
            'description': self.description,
            'category': self.category,
            'tags': list(self.tags),
            'version': self.version,
            'is_published': self.is_published,
            'is_private': self.is_private,
            'package_name': self.package_name,
            'package_id': self.package_id,
            'downloads': self.downloads,
            'usage_count': self.usage_count,
            'versions': [v.to_dict() for v in self.versions],
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }

    def snapshot(self) -> Dict[str, Any]:
        """Detached copy used as before/after state in audit records."""
        return copy.deepcopy(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Label':
        return cls(
            id=data['id'],
            owner_id=data['owner_id'],
            name=data['name'],
            display_name=data.get('display_name', data['name']),
            value=data.get('value', ''),
            description=data.get('description', ''),
            category=data.get('category', 'general'),
            tags=list(data.get('tags', [])),
            version=data.get('version', DEFAULT_VERSION),
            is_published=data.get('is_published', False),
            is_private=data.get('is_private', True),
            package_name=data.get('package_name', ''),
            package_id=data.get('package_id', ''),
            downloads=data.get('downloads', 0),
            usage_count=data.get('usage_count', 0),
            versions=[VersionEntry.from_dict(v) for v in data.get('versions', [])],
            created_at=_parse_datetime(data.get('created_at')),
            updated_at=_parse_datetime(data.get('updated_at')),
        )


@dataclass(frozen=True)
class RemoteLabel:
    """Label state as served by the CLI endpoints of the taggr API."""
    name: str
    value: str
    version: str = DEFAULT_VERSION
    display_name: str = ""
    description: str = ""
    category: str = "general"
    tags: tuple = ()
    is_published: bool = False
    package_name: str = ""

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> Optional['RemoteLabel']:
        """
        Create from an API label object.

        Returns None when the object lacks a name or a value; such entries
        are skipped rather than written to disk. Scalar fields are coerced to
        strings and a malformed tag list is dropped.
        """
        if not isinstance(data, dict):
            return None
        name = data.get('name')
        value = data.get('value')
        if not name or value is None:
            return None
        tags = data.get('tags')
        if not isinstance(tags, (list, tuple)):
            tags = ()
        return cls(
            name=str(name),
            value=str(value),
            version=str(data.get('version') or DEFAULT_VERSION),
            display_name=str(data.get('displayName') or ''),
            description=str(data.get('description') or ''),
            category=str(data.get('category') or 'general'),
            tags=tuple(str(tag) for tag in tags if tag is not None),
            is_published=bool(data.get('isPublished', False)),
            package_name=str(data.get('packageName') or ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'displayName': self.display_name,
            'value': self.value,
            'description': self.description,
            'category': self.category,
            'tags': list(self.tags),
            'version': self.version,
            'isPublished': self.is_published,
            'packageName': self.package_name,
        }
