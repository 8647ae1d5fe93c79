"""
Watch loop: poll the API and re-pull when remote labels change.

Each cycle fetches the remote labels, compares their versions with the sync
metadata and, when anything was updated, added or deleted, reports the diff
and rewrites the local files. Only one cycle runs at a time; a tick that
arrives while a cycle is in flight is skipped. Per-cycle failures are logged
and the loop carries on.
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from ..domain import RemoteLabel, SyncMetadata
from .pull_client import PullClient

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 30
MIN_INTERVAL = 5


class WatchState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    REPORTING = "reporting"
    PULLING = "pulling"


@dataclass
class LabelDiff:
    """Remote changes relative to the last sync."""
    updated: List[Tuple[str, str, str]] = field(default_factory=list)  # (name, old, new)
    new: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.updated or self.new or self.deleted)

    def to_dict(self):
        return {
            'updated': [{'name': n, 'from': old, 'to': new} for n, old, new in self.updated],
            'new': list(self.new),
            'deleted': list(self.deleted),
        }


def classify_changes(metadata: Optional[SyncMetadata], remote_labels: Iterable[RemoteLabel]) -> LabelDiff:
    """Classify each label as updated, new or deleted; unchanged labels are omitted."""
    known = metadata.versions() if metadata is not None else {}
    diff = LabelDiff()
    seen = set()

    for label in remote_labels:
        if not label.name:
            continue
        seen.add(label.name)
        if label.name not in known:
            diff.new.append(label.name)
        elif known[label.name] != label.version:
            diff.updated.append((label.name, known[label.name], label.version))

    diff.deleted = sorted(name for name in known if name not in seen)
    return diff


def resolve_interval(interval: Optional[float], default: float = DEFAULT_INTERVAL,
                     minimum: float = MIN_INTERVAL) -> float:
    """Validated poll interval; values below the minimum fall back to the default."""
    if interval is None:
        return default
    if interval < minimum:
        logger.warning(f"Interval must be at least {minimum} seconds. Using {default} seconds.")
        return default
    if interval > 3600:
        logger.warning("Interval is very large (>1 hour). Consider using a smaller value.")
    return interval


class WatchLoop:
    """
    Timer-driven poller around a PullClient.

    Example:
        loop = WatchLoop(PullClient(client, "./taggr"), interval=30,
                         on_change=lambda diff: print(diff.to_dict()))
        loop.run()  # until Ctrl+C or stop()
    """

    def __init__(
        self,
        pull_client: PullClient,
        interval: float = DEFAULT_INTERVAL,
        on_change: Optional[Callable[[LabelDiff], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self.pull_client = pull_client
        self.interval = interval
        self.on_change = on_change
        self.on_error = on_error
        self.state = WatchState.IDLE
        self.iteration = 0
        self._busy = threading.Lock()
        self._stop = threading.Event()

    def stop(self) -> None:
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def _fail(self, message: str, error: Exception) -> None:
        logger.warning(f"{message}: {error}")
        if self.on_error:
            self.on_error(error)

    def run_cycle(self) -> Optional[LabelDiff]:
        """
        Run one poll cycle.

        Returns:
            The diff that was found (possibly empty), or None when the tick
            was skipped or failed
        """
        if not self._busy.acquire(blocking=False):
            logger.debug("Previous cycle still running; skipping tick")
            return None

        try:
            self.iteration += 1
            self.state = WatchState.POLLING
            try:
                labels = self.pull_client.client.list_labels()
            except Exception as e:
                self._fail("Failed to fetch labels", e)
                return None

            diff = classify_changes(self.pull_client.metadata_store.load(), labels)
            if diff.is_empty:
                logger.debug(f"Cycle {self.iteration}: no changes detected")
                return diff

            self.state = WatchState.REPORTING
            if self.on_change:
                self.on_change(diff)

            self.state = WatchState.PULLING
            try:
                self.pull_client.write_all(labels)
            except Exception as e:
                self._fail("Failed to update labels", e)
                return None

            logger.info(f"Cycle {self.iteration}: pulled {len(labels)} label(s)")
            return diff
        finally:
            self.state = WatchState.IDLE
            self._busy.release()

    def run(self, max_cycles: Optional[int] = None) -> None:
        """Poll until stop() is called or ``max_cycles`` cycles have run."""
        cycles = 0
        while not self._stop.is_set():
            self.run_cycle()
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break
            self._stop.wait(self.interval)
