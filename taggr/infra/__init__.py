"""
Infrastructure layer for taggr.

Contains abstractions for external systems:
- TaggrClient: taggr HTTP API access
- ProcessRunner / SubprocessRunner: external command execution
- FileStore / write_atomic: JSON and text persistence with atomic writes

These provide clean interfaces that can be mocked for testing.
"""

from .api_client import TaggrClient
from .process import ProcessRunner, ProcessResult, SubprocessRunner
from .file_store import FileStore, write_atomic, write_json_atomic

__all__ = [
    'TaggrClient',
    'ProcessRunner',
    'ProcessResult',
    'SubprocessRunner',
    'FileStore',
    'write_atomic',
    'write_json_atomic',
]
