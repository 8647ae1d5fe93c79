"""
File store infrastructure for taggr.

Provides JSON file persistence with:
- Atomic writes (write to temp, then rename)
- Pretty formatting for human readability
- Thread-safe operations
- Automatic parent directory creation
"""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

logger = logging.getLogger(__name__)


def write_atomic(path: Union[str, Path], content: str) -> Path:
    """
    Write text to ``path`` atomically.

    The content goes to a temp file in the same directory which is then
    renamed over the target, so readers see either the old or the new file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp"
    )

    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        os.replace(temp_path, path)

    except BaseException:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise

    return path


def write_json_atomic(path: Union[str, Path], data: Any) -> Path:
    """Serialise ``data`` as pretty JSON and write it atomically."""
    return write_atomic(path, json.dumps(data, indent=2, ensure_ascii=False) + '\n')


class FileStore:
    """
    JSON file persistence with atomic writes.

    Example:
        store = FileStore(Path("~/.taggr/labels.json"))
        store.set("label-id", {"name": "greeting", ...})
        data = store.get("label-id")
    """

    def __init__(self, path: Path, auto_create: bool = True):
        """
        Initialize FileStore.

        Args:
            path: Path to JSON file
            auto_create: Create file and parent directories if they don't exist
        """
        self.path = Path(path).expanduser().resolve()
        self._lock = threading.RLock()
        self._cache: Optional[Dict[str, Any]] = None

        if auto_create:
            self._ensure_exists()

    def _ensure_exists(self) -> None:
        """Create file and parent directories if needed."""
        if not self.path.exists():
            write_json_atomic(self.path, {})

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Dict[str, Any]:
        """
        Read entire store.

        Returns:
            Dictionary with all stored data; empty if the file is missing,
            unreadable or does not hold a JSON object
        """
        with self._lock:
            if self._cache is not None:
                return self._cache.copy()

            try:
                if self.path.exists():
                    with open(self.path, 'r', encoding='utf-8') as f:
                        data = json.load(f)
                    if isinstance(data, dict):
                        self._cache = data
                        return self._cache.copy()
                    logger.warning(f"Ignoring {self.path}: expected a JSON object")
            except (json.JSONDecodeError, UnicodeDecodeError, IOError) as e:
                logger.warning(f"Error reading {self.path}: {e}")

            return {}

    def write(self, data: Dict[str, Any]) -> None:
        """
        Write entire store.

        Args:
            data: Dictionary to write
        """
        with self._lock:
            write_json_atomic(self.path, data)
            self._cache = data.copy()

    def get(self, key: str, default: Any = None) -> Any:
        """Get single value."""
        return self.read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set single value."""
        with self._lock:
            data = self.read()
            data[key] = value
            self.write(data)

    def delete(self, key: str) -> bool:
        """
        Delete a key.

        Returns:
            True if key was deleted, False if not found
        """
        with self._lock:
            data = self.read()
            if key in data:
                del data[key]
                self.write(data)
                return True
            return False

    def values(self) -> list:
        """Get all values."""
        return list(self.read().values())

