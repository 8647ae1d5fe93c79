"""
Tests for the label service: lifecycle operations, audit trail and the
publish pipeline's tolerance of registry failures.
"""

import sys
import unittest
from unittest.mock import MagicMock

import pytest

from taggr.domain import AuditAction
from taggr.errors import (
    LabelConflictError,
    LabelNotFoundError,
    MalformedVersionError,
)
from taggr.services import (
    InMemoryAuditLog,
    InMemoryLabelStore,
    LabelService,
    PublishExecutor,
    PublishResult,
    PublishSettings,
)


def make_service(result=None):
    executor = MagicMock(spec=PublishExecutor)
    executor.publish.return_value = result or PublishResult(success=True, package_id="npm-1-2")
    return LabelService(InMemoryLabelStore(), InMemoryAuditLog(), executor)


def create(service, name="greeting", **kwargs):
    return service.create_label("alice", name=name, display_name=name.title(), value="Hello", **kwargs)


class TestPublishPipeline:

    def test_registry_failure_still_publishes_internally(self):
        service = make_service(PublishResult(success=False, error="npm ERR! 503"))
        label = create(service)

        outcome = service.publish_label("alice", label.id, changelog="Wording")

        assert outcome.label.is_published is True
        assert outcome.label.version == "1.0.1"
        assert outcome.registry_published is False
        assert len(outcome.warnings) == 1
        assert "npm ERR! 503" in outcome.warnings[0]

        stored = service.get_label("alice", label.id)
        assert stored.is_published is True
        assert stored.version == "1.0.1"

        publishes = [r for r in service.audit_log.records if r.action == AuditAction.PUBLISH]
        assert len(publishes) == 1
        assert publishes[0].after["version"] == "1.0.1"

    def test_undecodable_tool_output_is_a_warning(self, tmp_path):
        script = "import sys; sys.stdout.buffer.write(b'\\xff'); sys.exit(1)"
        executor = PublishExecutor(PublishSettings(
            command=(sys.executable, "-c", script),
            scratch_root=str(tmp_path),
        ))
        service = LabelService(InMemoryLabelStore(), InMemoryAuditLog(), executor)
        label = create(service)

        outcome = service.publish_label("alice", label.id)

        assert outcome.label.version == "1.0.1"
        assert outcome.registry_published is False
        assert len(outcome.warnings) == 1
        publishes = [r for r in service.audit_log.records if r.action == AuditAction.PUBLISH]
        assert len(publishes) == 1
        assert list(tmp_path.iterdir()) == []

    def test_success_records_package_id(self):
        service = make_service()
        label = create(service)

        outcome = service.publish_label("alice", label.id, bump="minor")

        assert outcome.warnings == []
        assert outcome.previous_version == "1.0.0"
        assert outcome.label.version == "1.1.0"
        assert service.get_label("alice", label.id).package_id == "npm-1-2"
        service.executor.publish.assert_called_once()

    def test_one_publish_audit_per_call(self):
        service = make_service()
        label = create(service)
        service.publish_label("alice", label.id)
        service.publish_label("alice", label.id, bump="major")

        records = service.audit_log.records_for(label.id)
        assert [r.action for r in records] == [AuditAction.CREATE, AuditAction.PUBLISH, AuditAction.PUBLISH]
        assert service.get_label("alice", label.id).version == "2.0.0"

    def test_default_changelog(self):
        service = make_service()
        label = create(service)
        service.publish_label("alice", label.id)
        history = service.version_history("alice", label.id)
        assert history[0].changelog == "Version 1.0.1"

    def test_other_owner_cannot_publish(self):
        service = make_service()
        label = create(service)
        with pytest.raises(LabelNotFoundError):
            service.publish_label("mallory", label.id)
        service.executor.publish.assert_not_called()

    def test_malformed_stored_version_aborts_before_audit(self):
        service = make_service()
        label = create(service)
        label.version = "1.0"
        service.store.save(label)

        with pytest.raises(MalformedVersionError):
            service.publish_label("alice", label.id)
        assert [r.action for r in service.audit_log.records] == [AuditAction.CREATE]


class TestLabelLifecycle(unittest.TestCase):

    def setUp(self):
        self.service = make_service()

    def test_create_normalises_and_audits(self):
        label = self.service.create_label("alice", name="  Greeting ", display_name="Greeting",
                                          value="Hi", category="UI", tags=["a"])
        self.assertEqual(label.name, "greeting")
        self.assertEqual(label.category, "ui")
        self.assertEqual(label.package_name, "@alice/greeting")
        self.assertEqual(label.version, "1.0.0")
        self.assertEqual(label.versions, [])
        self.assertFalse(label.is_published)

        (record,) = self.service.audit_log.records
        self.assertEqual(record.action, AuditAction.CREATE)
        self.assertEqual(record.before, {})
        self.assertEqual(record.after["name"], "greeting")

    def test_duplicate_name_conflicts(self):
        create(self.service)
        with self.assertRaises(LabelConflictError):
            create(self.service, name="GREETING")

    def test_same_name_for_different_owner(self):
        create(self.service)
        other = self.service.create_label("bob", name="greeting", display_name="G", value="Yo")
        self.assertEqual(other.package_name, "@bob/greeting")

    def test_create_requires_name(self):
        with self.assertRaises(ValueError):
            self.service.create_label("alice", name="  ", display_name="x", value="y")

    def test_update_audits_before_and_after(self):
        label = create(self.service)
        updated = self.service.update_label("alice", label.id, value="Howdy", tags=["x", "y"])

        self.assertEqual(updated.value, "Howdy")
        self.assertEqual(updated.tags, ["x", "y"])
        record = self.service.audit_log.records[-1]
        self.assertEqual(record.action, AuditAction.UPDATE)
        self.assertEqual(record.before["value"], "Hello")
        self.assertEqual(record.after["value"], "Howdy")

    def test_update_rejects_immutable_fields(self):
        label = create(self.service)
        with self.assertRaises(ValueError):
            self.service.update_label("alice", label.id, version="9.9.9")
        self.assertEqual(len(self.service.audit_log.records), 1)

    def test_delete_keeps_audit_trail(self):
        label = create(self.service)
        self.service.delete_label("alice", label.id)

        with self.assertRaises(LabelNotFoundError):
            self.service.get_label("alice", label.id)
        actions = [r.action for r in self.service.audit_log.records_for(label.id)]
        self.assertEqual(actions, [AuditAction.CREATE, AuditAction.DELETE])
        self.assertEqual(self.service.audit_log.records[-1].after, {})

    def test_find_by_name(self):
        label = create(self.service)
        self.assertEqual(self.service.find_label_by_name("alice", "Greeting").id, label.id)
        with self.assertRaises(LabelNotFoundError):
            self.service.find_label_by_name("alice", "missing")

    def test_list_filters(self):
        create(self.service, name="greeting", category="ui", tags=["home"])
        create(self.service, name="farewell", category="email", tags=["footer"])

        self.assertEqual(len(self.service.list_labels("alice")), 2)
        self.assertEqual([l.name for l in self.service.list_labels("alice", query="fare")], ["farewell"])
        self.assertEqual([l.name for l in self.service.list_labels("alice", category="UI")], ["greeting"])
        self.assertEqual([l.name for l in self.service.list_labels("alice", tags=["footer"])], ["farewell"])
        self.assertEqual(self.service.list_labels("bob"), [])

    def test_version_history_newest_first(self):
        label = create(self.service)
        self.service.publish_label("alice", label.id)
        self.service.publish_label("alice", label.id, bump="minor")
        versions = [e.version for e in self.service.version_history("alice", label.id)]
        self.assertEqual(versions, ["1.1.0", "1.0.1"])

    def test_stats(self):
        label = create(self.service)
        create(self.service, name="other")
        self.service.publish_label("alice", label.id)

        stats = self.service.label_stats("alice")
        self.assertEqual(stats["total_labels"], 2)
        self.assertEqual(stats["published_labels"], 1)
        self.assertEqual(stats["total_usage"], 0)
        self.assertEqual(self.service.label_stats("nobody")["average_usage"], 0)

    def test_export_then_import(self):
        create(self.service, name="greeting")
        exported = self.service.export_labels("alice")

        counts = self.service.import_labels("bob", exported + [{"name": ""}, {"name": "greeting"}])
        self.assertEqual(counts, {"imported": 1, "failed": 2})
        self.assertEqual(self.service.find_label_by_name("bob", "greeting").value, "Hello")
