"""
Publish executor for label packages.

Materialises a label's artifacts into a scratch directory, runs the
external publish tool there and removes the directory on every exit path.
Registry failures come back as a PublishResult with success=False; they are
never raised to the caller.
"""

import logging
import os
import secrets
import shutil
import subprocess
import tempfile
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, Iterator, Tuple

from ..domain import Label, PackageArtifactSet
from ..errors import RegistryPublishError, ScratchResourceError
from ..infra import ProcessRunner, SubprocessRunner, write_atomic
from .artifacts import ManifestOptions, build_artifact_set

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishSettings:
    """Publish tool invocation settings."""
    registry_url: str = "http://localhost:4873"
    command: Tuple[str, ...] = ("npm", "publish")
    timeout_seconds: float = 120
    scratch_root: Optional[str] = None
    manifest: ManifestOptions = field(default_factory=ManifestOptions)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'PublishSettings':
        publish = config.get('publish', {})
        command = publish.get('command') or cls.command
        if isinstance(command, str):
            command = command.split()
        return cls(
            registry_url=publish.get('registry_url') or cls.registry_url,
            command=tuple(command),
            timeout_seconds=publish.get('timeout_seconds') or cls.timeout_seconds,
            scratch_root=publish.get('scratch_root') or None,
            manifest=ManifestOptions.from_config(config),
        )


@dataclass(frozen=True)
class PublishResult:
    """Outcome of one publish attempt."""
    success: bool
    package_id: Optional[str] = None
    error: Optional[str] = None


def _scratch_prefix(label_id: str) -> str:
    # Nanosecond clock plus mkdtemp's random suffix keep concurrent publishes apart
    return f"taggr-{label_id}-{time.time_ns()}-{secrets.token_hex(4)}-"


@contextmanager
def scratch_directory(label_id: str, root: Optional[str] = None) -> Iterator[Path]:
    """
    Acquire a uniquely named scratch directory and always remove it.

    Removal failures are logged and swallowed so they never mask the result
    of the work done inside the block.

    Raises:
        ScratchResourceError: if the directory cannot be created
    """
    try:
        path = Path(tempfile.mkdtemp(prefix=_scratch_prefix(label_id), dir=root))
    except OSError as e:
        raise ScratchResourceError(f"Could not create scratch directory: {e}") from e

    logger.debug(f"Created scratch directory: {path}")
    try:
        yield path
    finally:
        try:
            shutil.rmtree(path)
            logger.debug(f"Cleaned up scratch directory: {path}")
        except OSError as e:
            logger.warning(f"Failed to clean up scratch directory {path}: {e}")


def write_artifacts(artifacts: PackageArtifactSet, directory: Path) -> None:
    """Write every artifact file under ``directory`` in registry layout."""
    for relative_path, content in artifacts.files().items():
        write_atomic(directory / relative_path, content)


class PublishExecutor:
    """
    Runs the external publish tool for a label.

    Example:
        executor = PublishExecutor(PublishSettings(registry_url="http://localhost:4873"))
        result = executor.publish(label, owner_id="alice")
        if not result.success:
            print(result.error)
    """

    def __init__(self, settings: Optional[PublishSettings] = None,
                 runner: Optional[ProcessRunner] = None):
        self.settings = settings or PublishSettings()
        self.runner = runner or SubprocessRunner()

    def _environment(self) -> Dict[str, str]:
        env = dict(os.environ)
        env['NPM_CONFIG_REGISTRY'] = self.settings.registry_url
        return env

    def _run_publish_tool(self, directory: Path) -> None:
        """Invoke the publish tool; raise RegistryPublishError on any failure."""
        try:
            result = self.runner.run(
                self.settings.command,
                cwd=directory,
                env=self._environment(),
                timeout=self.settings.timeout_seconds,
            )
        except subprocess.TimeoutExpired as e:
            raise RegistryPublishError(f"Publish tool timed out after {e.timeout}s") from e
        except OSError as e:
            raise RegistryPublishError(f"Could not run publish tool: {e}") from e

        if result.stderr and 'npm notice' not in result.stderr:
            logger.warning(f"Publish tool stderr: {result.stderr}")
        if result.stdout:
            logger.info(f"Publish tool output: {result.stdout}")

        if not result.ok:
            detail = result.stderr or result.stdout or "no output"
            raise RegistryPublishError(
                f"Publish tool exited with code {result.returncode}: {detail}",
                returncode=result.returncode,
            )

    def publish(self, label: Label, owner_id: str) -> PublishResult:
        """
        Publish ``label`` to the configured registry.

        Returns:
            PublishResult; success=False carries the captured error text
        """
        logger.info(f"Publishing {label.package_name}@{label.version} to {self.settings.registry_url}")

        try:
            artifacts = build_artifact_set(label, owner_id, self.settings.manifest)
            with scratch_directory(label.id, self.settings.scratch_root) as directory:
                write_artifacts(artifacts, directory)
                self._run_publish_tool(directory)
        except RegistryPublishError as e:
            logger.warning(f"Failed to publish {label.package_name}: {e}")
            return PublishResult(success=False, error=str(e))
        except OSError as e:
            logger.warning(f"Failed to stage {label.package_name} for publishing: {e}")
            return PublishResult(success=False, error=f"I/O error during publish: {e}")
        except Exception as e:
            logger.warning(f"Unexpected error publishing {label.package_name}: {e}", exc_info=True)
            return PublishResult(success=False, error=f"Unexpected error during publish: {e}")

        package_id = f"npm-{label.id}-{int(time.time() * 1000)}"
        logger.info(f"Successfully published {label.package_name}@{label.version}")
        return PublishResult(success=True, package_id=package_id)
