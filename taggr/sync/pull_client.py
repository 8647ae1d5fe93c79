"""
Pull label state from the taggr API into local files.

Output directory layout:
    labels.json   flat camelCase(name) -> value mapping
    labels.d.ts   TypeScript declaration for that mapping
    .taggr.json   sync metadata

A full pull replaces labels.json; a single-label pull merges into it. Pull
always wins over local edits: drift is reported but never blocks a write.
"""

import json
import logging
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..domain import RemoteLabel
from ..errors import DriftDetectedWarning
from ..infra import TaggrClient, write_atomic, write_json_atomic
from .drift import DriftDetector, DriftReport, LABELS_FILE, to_camel_case
from .metadata_store import SyncMetadataStore

logger = logging.getLogger(__name__)

TYPES_FILE = 'labels.d.ts'


@dataclass
class PullResult:
    """What a pull wrote."""
    labels: List[RemoteLabel] = field(default_factory=list)
    files: List[Path] = field(default_factory=list)
    drift: Optional[DriftReport] = None

    @property
    def count(self) -> int:
        return len(self.labels)


def render_labels_json(values: Dict[str, str]) -> str:
    return json.dumps(dict(sorted(values.items())), indent=2, ensure_ascii=False) + '\n'


def render_type_declarations(keys) -> str:
    """Declaration file describing labels.json."""
    lines = [
        "// Generated by taggr. Do not edit; run \"taggr pull --all\" to regenerate.",
        "",
        "export interface Labels {",
    ]
    for key in sorted(keys):
        lines.append(f"  {json.dumps(key)}: string;")
    lines += [
        "}",
        "",
        "declare const labels: Labels;",
        "export default labels;",
        "",
    ]
    return "\n".join(lines)


class PullClient:
    """
    Fetch labels and write them under ``output_dir``.

    Example:
        client = TaggrClient(api_url, api_key)
        puller = PullClient(client, Path("./taggr"))
        result = puller.pull_all()
    """

    def __init__(
        self,
        client: TaggrClient,
        output_dir: Union[str, Path],
        source_url: Optional[str] = None,
        metadata_store: Optional[SyncMetadataStore] = None,
    ):
        self.client = client
        self.output_dir = Path(output_dir)
        self.source_url = source_url or client.api_url
        self.metadata_store = metadata_store or SyncMetadataStore(self.output_dir)
        self.drift_detector = DriftDetector(self.output_dir, self.metadata_store)

    @property
    def labels_path(self) -> Path:
        return self.output_dir / LABELS_FILE

    @property
    def types_path(self) -> Path:
        return self.output_dir / TYPES_FILE

    def _read_local_values(self) -> Dict[str, str]:
        """Current labels.json contents; unreadable files start over empty."""
        if not self.labels_path.exists():
            return {}
        try:
            with open(self.labels_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Replacing unreadable {self.labels_path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Replacing {self.labels_path}: expected a JSON object")
            return {}
        return data

    def _write_files(self, values: Dict[str, str]) -> List[Path]:
        write_atomic(self.labels_path, render_labels_json(values))
        write_atomic(self.types_path, render_type_declarations(values.keys()))
        return [self.labels_path, self.types_path]

    def write_all(self, labels: List[RemoteLabel]) -> List[Path]:
        """Replace local files and metadata with ``labels``."""
        values = {to_camel_case(label.name): label.value for label in labels}
        files = self._write_files(values)
        self.metadata_store.save(labels, self.source_url)
        files.append(self.metadata_store.path)
        return files

    def pull_all(self) -> PullResult:
        """
        Fetch every label and rewrite the local files.

        Raises:
            NetworkError / ApiError: when the API cannot be read
        """
        labels = self.client.list_labels()
        result = PullResult(labels=labels)
        if not labels:
            logger.info("No labels found")
            return result

        result.drift = self.drift_detector.detect(labels)
        if result.drift.is_edited:
            warnings.warn(result.drift.reason or "Labels may have been manually edited", DriftDetectedWarning)
            logger.warning(f"Manual edits detected: {result.drift.reason}. Pulling will overwrite them.")

        result.files = self.write_all(labels)
        logger.info(f"Pulled {len(labels)} label(s) into {self.output_dir}")
        return result

    def pull_one(self, name: str) -> PullResult:
        """Fetch one label and merge it into the local files."""
        label = self.client.get_label(name)

        values = self._read_local_values()
        values[to_camel_case(label.name)] = label.value
        files = self._write_files(values)
        self.metadata_store.patch_one(label, self.source_url)
        files.append(self.metadata_store.path)

        logger.info(f"Pulled {label.name}@{label.version} into {self.output_dir}")
        return PullResult(labels=[label], files=files)
