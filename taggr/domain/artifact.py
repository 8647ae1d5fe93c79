"""
Package artifact set generated for one publish call.

Derived from a label, never persisted; its lifetime is a single publish.
"""

from dataclasses import dataclass, field
from typing import Dict, Any
import json


MANIFEST_FILE = "package.json"
ENTRY_MODULE_FILE = "dist/index.js"
TYPE_DECLARATION_FILE = "dist/index.d.ts"
README_FILE = "README.md"


@dataclass(frozen=True)
class PackageArtifactSet:
    """Manifest, entry module, type declaration and README for a label."""
    manifest: Dict[str, Any] = field(default_factory=dict)
    entry_module: str = ""
    type_declaration: str = ""
    readme: str = ""

    def files(self) -> Dict[str, str]:
        """Relative path -> file content, in the registry's expected layout."""
        return {
            MANIFEST_FILE: json.dumps(self.manifest, indent=2, ensure_ascii=False) + "\n",
            ENTRY_MODULE_FILE: self.entry_module,
            TYPE_DECLARATION_FILE: self.type_declaration,
            README_FILE: self.readme,
        }
