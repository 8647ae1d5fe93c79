"""
Per-invocation context for taggr commands.

Built once by the CLI group from the loaded configuration and handed to
commands through ``ctx.obj``. The API client is created lazily on first use
so commands that never talk to the server do not need an API key.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from .config import load_config
from .exit_codes import NotLoggedInError
from .infra import TaggrClient
from .sync import PullClient, SyncMetadataStore


class TaggrContext:
    """Configuration plus the collaborators derived from it."""

    def __init__(self, config: Optional[Dict[str, Any]] = None, client: Optional[TaggrClient] = None):
        self.config = config if config is not None else load_config()
        self._client = client

    @property
    def api_url(self) -> str:
        return str(self.config.get('api', {}).get('url', '')).rstrip('/')

    @property
    def api_key(self) -> str:
        return self.config.get('api', {}).get('key') or ''

    @property
    def is_authenticated(self) -> bool:
        return bool(self.api_key)

    @property
    def output_dir(self) -> Path:
        return Path(self.config.get('sync', {}).get('output_dir') or './taggr')

    @property
    def watch_interval(self) -> float:
        return self.config.get('sync', {}).get('watch_interval_seconds', 30)

    @property
    def min_watch_interval(self) -> float:
        return self.config.get('sync', {}).get('min_watch_interval_seconds', 5)

    @property
    def is_ci(self) -> bool:
        return os.environ.get('CI', '').lower() in ('true', '1')

    def require_auth(self) -> TaggrClient:
        """
        Return the API client.

        Raises:
            NotLoggedInError: when no API key is configured
        """
        if self._client is None:
            if not self.is_authenticated:
                raise NotLoggedInError()
            self._client = TaggrClient(
                self.api_url,
                self.api_key,
                timeout=self.config.get('api', {}).get('timeout_seconds', 30),
            )
        return self._client

    def metadata_store(self) -> SyncMetadataStore:
        return SyncMetadataStore(self.output_dir)

    def pull_client(self) -> PullClient:
        client = self.require_auth()
        return PullClient(client, self.output_dir, source_url=self.api_url,
                          metadata_store=self.metadata_store())
