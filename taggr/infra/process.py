"""
External process execution for taggr.

The publish executor only talks to ProcessRunner, a narrow interface of
(command, working directory, environment, timeout). Tests substitute a stub
instead of spawning real processes.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of one external command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ProcessRunner(Protocol):
    def run(
        self,
        command: Sequence[str],
        cwd: Path,
        env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        ...


class SubprocessRunner:
    """
    Runs commands with ``subprocess.run`` and captures their output.

    Never uses a shell. Raises ``subprocess.TimeoutExpired`` on timeout and
    ``OSError`` when the executable cannot be started; a non-zero exit is
    returned, not raised.
    """

    def run(
        self,
        command: Sequence[str],
        cwd: Path,
        env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        cmd_str = ' '.join(command)
        logger.debug(f"Running command in '{cwd}': {cmd_str}")

        result = subprocess.run(
            list(command),
            cwd=str(cwd),
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            encoding='utf-8',
            errors='replace',
            timeout=timeout,
            check=False,
        )

        if result.stdout and result.stdout.strip():
            logger.debug(result.stdout.strip())

        if result.returncode != 0 and result.stderr and result.stderr.strip():
            logger.debug(f"Command failed with exit code {result.returncode}: {cmd_str}")

        return ProcessResult(
            returncode=result.returncode,
            stdout=(result.stdout or '').strip(),
            stderr=(result.stderr or '').strip(),
        )
