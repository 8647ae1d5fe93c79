"""
taggr - Versioned labels, published as packages and synced to your projects.

A label is a named, versioned text value. On the server side taggr keeps
each label's version history and audit trail and publishes it as an
installable registry package; on the client side it pulls labels into
local files and verifies them against checksums recorded at sync time.

Quick Start:
    from taggr import LabelService

    service = LabelService()
    label = service.create_label("alice", name="welcome-message",
                                 display_name="Welcome", value="Hello!")
    outcome = service.publish_label("alice", label.id, changelog="First release")
    print(outcome.label.version)   # 1.0.1
    print(outcome.warnings)        # registry problems, if any

    from taggr import TaggrClient, PullClient

    client = TaggrClient("https://taggr.onrender.com/api", api_key)
    result = PullClient(client, "./taggr").pull_all()

Services:
    LabelService - label lifecycle, version history and audit
    PublishExecutor - registry publishing with scratch-directory cleanup

Sync:
    PullClient - write labels.json, labels.d.ts and .taggr.json
    DriftDetector - detect manual edits to pulled labels
    WatchLoop - poll for remote changes and re-pull
"""

__version__ = "1.0.0"

# Domain objects
from .domain import (
    Label,
    VersionEntry,
    RemoteLabel,
    AuditRecord,
    AuditAction,
    SyncMetadata,
    LabelSyncEntry,
    PackageArtifactSet,
)

# Services
from .services import (
    LabelService,
    PublishOutcome,
    PublishExecutor,
    PublishSettings,
    PublishResult,
)

# Client side
from .infra import TaggrClient
from .sync import (
    PullClient,
    SyncMetadataStore,
    DriftDetector,
    WatchLoop,
)

__all__ = [
    "__version__",
    "Label",
    "VersionEntry",
    "RemoteLabel",
    "AuditRecord",
    "AuditAction",
    "SyncMetadata",
    "LabelSyncEntry",
    "PackageArtifactSet",
    "LabelService",
    "PublishOutcome",
    "PublishExecutor",
    "PublishSettings",
    "PublishResult",
    "TaggrClient",
    "PullClient",
    "SyncMetadataStore",
    "DriftDetector",
    "WatchLoop",
]
