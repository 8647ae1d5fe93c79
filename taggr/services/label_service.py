"""
Label service for taggr.

Server-side label lifecycle: create, update, delete and publish, each
writing exactly one audit record synchronously with the mutation.

Publishing bumps the version, appends a version entry, persists the label
and then hands it to the publish executor. A registry failure does not undo
any of that: internal state is authoritative and the failure is returned
as a warning.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Iterable

from ..domain import Label, VersionEntry, AuditAction
from ..errors import LabelNotFoundError, LabelConflictError, LabelOwnershipError, TaggrError
from . import version_manager
from .publish_executor import PublishExecutor, PublishResult
from .stores import LabelStore, AuditLog, InMemoryLabelStore, InMemoryAuditLog

logger = logging.getLogger(__name__)

# Fields a caller may change through update_label
MUTABLE_FIELDS = ('display_name', 'value', 'description', 'category', 'tags', 'is_private')


def normalize_name(name: str) -> str:
    return (name or '').strip().lower()


@dataclass
class PublishOutcome:
    """Result of a publish call: the committed label plus registry outcome."""
    label: Label
    previous_version: str
    registry: PublishResult
    warnings: List[str] = field(default_factory=list)

    @property
    def registry_published(self) -> bool:
        return self.registry.success


class LabelService:
    """
    Orchestrates label storage, version management, audit and publishing.

    Example:
        service = LabelService()
        label = service.create_label("alice", name="greeting",
                                     display_name="Greeting", value="Hello")
        outcome = service.publish_label("alice", label.id, bump="minor")
        print(outcome.label.version, outcome.warnings)
    """

    def __init__(
        self,
        store: Optional[LabelStore] = None,
        audit_log: Optional[AuditLog] = None,
        executor: Optional[PublishExecutor] = None,
    ):
        self.store = store if store is not None else InMemoryLabelStore()
        self.audit_log = audit_log if audit_log is not None else InMemoryAuditLog()
        self.executor = executor or PublishExecutor()

    def _owned_label(self, actor: str, label_id: str) -> Label:
        label = self.store.get(actor, label_id)
        if label is None:
            raise LabelNotFoundError(label_id)
        if label.owner_id != actor:
            raise LabelOwnershipError(f"{actor} does not own label {label_id}")
        return label

    def create_label(
        self,
        actor: str,
        name: str,
        display_name: str,
        value: str,
        description: str = "",
        category: str = "general",
        tags: Optional[Iterable[str]] = None,
        is_private: bool = True,
    ) -> Label:
        """Create a label at version 1.0.0 with an empty history."""
        name = normalize_name(name)
        if not name:
            raise ValueError("Label name is required")
        if value is None:
            raise ValueError("Label value is required")
        if self.store.find_by_name(actor, name) is not None:
            raise LabelConflictError(f"Label with name {name!r} already exists")

        label = Label(
            owner_id=actor,
            name=name,
            display_name=(display_name or name).strip(),
            value=value,
            description=(description or '').strip(),
            category=normalize_name(category) or 'general',
            tags=list(tags or []),
            is_private=is_private,
        )
        self.store.save(label)
        self.audit_log.append(version_manager.build_audit_record(
            actor, AuditAction.CREATE, label, before={}, after=label.snapshot()
        ))
        logger.info(f"Created label {label.package_name}")
        return label

    def get_label(self, actor: str, label_id: str) -> Label:
        return self._owned_label(actor, label_id)

    def find_label_by_name(self, actor: str, name: str) -> Label:
        label = self.store.find_by_name(actor, normalize_name(name))
        if label is None:
            raise LabelNotFoundError(name)
        return label

    def list_labels(
        self,
        actor: str,
        query: Optional[str] = None,
        category: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> List[Label]:
        """List an owner's labels, newest first, optionally filtered."""
        labels = self.store.list(actor)

        if query:
            needle = query.lower()
            labels = [l for l in labels if needle in l.name.lower()
                      or needle in l.display_name.lower()
                      or needle in l.description.lower()]
        if category:
            labels = [l for l in labels if l.category == normalize_name(category)]
        if tags:
            wanted = set(tags)
            labels = [l for l in labels if wanted.intersection(l.tags)]

        return sorted(labels, key=lambda l: l.created_at, reverse=True)

    def update_label(self, actor: str, label_id: str, **changes) -> Label:
        """Update mutable fields of a label and audit the before/after state."""
        unknown = set(changes) - set(MUTABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        label = self._owned_label(actor, label_id)
        before = label.snapshot()

        for key, value in changes.items():
            if key == 'tags':
                value = list(value or [])
            elif key == 'category':
                value = normalize_name(value) or 'general'
            setattr(label, key, value)
        label.touch()

        self.store.save(label)
        self.audit_log.append(version_manager.build_audit_record(
            actor, AuditAction.UPDATE, label, before=before, after=label.snapshot()
        ))
        return label

    def delete_label(self, actor: str, label_id: str) -> None:
        """Hard-delete a label; its audit trail is kept."""
        label = self._owned_label(actor, label_id)
        self.audit_log.append(version_manager.build_audit_record(
            actor, AuditAction.DELETE, label, before=label.snapshot(), after={}
        ))
        self.store.delete(actor, label_id)
        logger.info(f"Deleted label {label.package_name}")

    def publish_label(
        self,
        actor: str,
        label_id: str,
        changelog: Optional[str] = None,
        bump: str = 'patch',
    ) -> PublishOutcome:
        """
        Bump, record and publish a label.

        Exactly one publish audit record is written, after the version
        mutation is persisted and before the registry is contacted, so the
        registry outcome cannot affect it.

        Raises:
            LabelNotFoundError / LabelOwnershipError: ownership validation failed
            MalformedVersionError / NonMonotonicVersionError: version invalid
        """
        label = self._owned_label(actor, label_id)
        previous_version = label.version

        new_version = version_manager.bump(label.version, bump)
        _, record = version_manager.append_version_entry(
            label,
            new_version,
            changelog or f"Version {new_version}",
            label.value,
            actor=actor,
        )
        self.store.save(label)
        self.audit_log.append(record)

        result = self.executor.publish(label, actor)
        warnings = []
        if result.success:
            label.package_id = result.package_id or ''
            self.store.save(label)
        else:
            message = f"Failed to publish {label.package_name} to registry: {result.error}"
            logger.warning(message)
            warnings.append(message)

        return PublishOutcome(
            label=label,
            previous_version=previous_version,
            registry=result,
            warnings=warnings,
        )

    def version_history(self, actor: str, label_id: str) -> List[VersionEntry]:
        """Version entries newest first."""
        label = self._owned_label(actor, label_id)
        return list(reversed(label.versions))

    def label_stats(self, actor: str) -> Dict[str, Any]:
        labels = self.store.list(actor)
        total = len(labels)
        usage = sum(l.usage_count for l in labels)
        return {
            'total_labels': total,
            'published_labels': sum(1 for l in labels if l.is_published),
            'total_downloads': sum(l.downloads for l in labels),
            'total_usage': usage,
            'average_usage': round(usage / total) if total else 0,
        }

    def export_labels(self, actor: str) -> List[Dict[str, Any]]:
        return [label.to_dict() for label in self.store.list(actor)]

    def import_labels(self, actor: str, records: Iterable[Dict[str, Any]]) -> Dict[str, int]:
        """Create labels from plain records; failures are counted, not raised."""
        imported = failed = 0
        for record in records:
            try:
                self.create_label(
                    actor,
                    name=record.get('name', ''),
                    display_name=record.get('display_name') or record.get('displayName') or record.get('name', ''),
                    value=record.get('value'),
                    description=record.get('description', ''),
                    category=record.get('category', 'general'),
                    tags=record.get('tags'),
                )
                imported += 1
            except (TaggrError, ValueError, AttributeError) as e:
                logger.debug(f"Import of {record!r} failed: {e}")
                failed += 1
        return {'imported': imported, 'failed': failed}
