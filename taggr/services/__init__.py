"""
Service layer for taggr.

Contains the server-side label lifecycle:
- LabelService: create, update, delete and publish labels with audit
- version_manager: semantic version bumping and version history
- PublishExecutor: stage artifacts and run the registry publish tool
- artifacts: manifest, entry module, type declaration and README rendering

Services are the primary API for embedding applications.
"""

from .label_service import LabelService, PublishOutcome
from .publish_executor import PublishExecutor, PublishSettings, PublishResult
from .stores import InMemoryLabelStore, JsonLabelStore, InMemoryAuditLog, JsonlAuditLog
from .artifacts import ManifestOptions, build_artifact_set

__all__ = [
    'LabelService',
    'PublishOutcome',
    'PublishExecutor',
    'PublishSettings',
    'PublishResult',
    'InMemoryLabelStore',
    'JsonLabelStore',
    'InMemoryAuditLog',
    'JsonlAuditLog',
    'ManifestOptions',
    'build_artifact_set',
]
