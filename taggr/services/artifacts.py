"""
Artifact generation for label packages.

Pure functions that render a label into the files a JavaScript package
registry expects: manifest, ES module entry point, TypeScript declaration
and README. No I/O happens here; the publish executor writes the results.

String values are emitted as JSON string literals, which are valid
JavaScript literals, so quotes, backslashes and newlines in label text
never break the generated module.
"""

import json
import re
from dataclasses import dataclass
from typing import Dict, Any

from ..domain import Label, PackageArtifactSet


@dataclass(frozen=True)
class ManifestOptions:
    """Static manifest fields supplied by configuration."""
    homepage_url: str = "https://taggr.dev"
    repository_url: str = "https://github.com/taggr"
    license: str = "MIT"

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'ManifestOptions':
        publish = config.get('publish', {})
        return cls(
            homepage_url=str(publish.get('homepage_url') or cls.homepage_url).rstrip('/'),
            repository_url=str(publish.get('repository_url') or cls.repository_url).rstrip('/'),
            license=str(publish.get('license') or cls.license),
        )


def js_string(value) -> str:
    """Render ``value`` as a double-quoted JavaScript string literal."""
    return json.dumps("" if value is None else str(value), ensure_ascii=True)


def pascal_case(name: str) -> str:
    """
    Convert a label name to a PascalCase identifier.

    ``my-label`` -> ``MyLabel``; separators are '-', '_', '.', and whitespace.
    """
    words = [w for w in re.split(r'[-_.\s]+', name) if w]
    ident = ''.join(re.sub(r'[^A-Za-z0-9]', '', w[:1].upper() + w[1:]) for w in words)
    if not ident:
        ident = 'Unnamed'
    if ident[0].isdigit():
        ident = f"_{ident}"
    return ident


def interface_name(label: Label) -> str:
    return f"{pascal_case(label.name)}Label"


def build_manifest(label: Label, owner_id: str, options: ManifestOptions = ManifestOptions()) -> Dict[str, Any]:
    """Build the package manifest (package.json) for a label."""
    return {
        'name': label.package_name,
        'version': label.version,
        'description': f"{label.display_name} - {label.description}" if label.description else label.display_name,
        'main': 'dist/index.js',
        'types': 'dist/index.d.ts',
        'files': ['dist', 'README.md'],
        'author': {
            'name': owner_id,
            'url': f"{options.homepage_url}/{owner_id}",
        },
        'homepage': f"{options.homepage_url}/labels/{label.id}",
        'repository': {
            'type': 'git',
            'url': f"{options.repository_url}/{label.name}",
        },
        'keywords': ['label', 'taggr', *label.tags],
        'license': options.license,
        'publishConfig': {
            'access': 'restricted' if label.is_private else 'public',
        },
    }


def render_entry_module(label: Label) -> str:
    """Render dist/index.js: a default export holding value and metadata."""
    return (
        "export default {\n"
        f"  value: {js_string(label.value)},\n"
        "  metadata: {\n"
        f"    name: {js_string(label.name)},\n"
        f"    displayName: {js_string(label.display_name)},\n"
        f"    description: {js_string(label.description)},\n"
        f"    category: {js_string(label.category)},\n"
        f"    tags: {json.dumps(list(label.tags), ensure_ascii=True)},\n"
        f"    version: {js_string(label.version)}\n"
        "  }\n"
        "};\n"
    )


def render_type_declaration(label: Label) -> str:
    """Render dist/index.d.ts describing the entry module's default export."""
    name = interface_name(label)
    return (
        f"export interface {name} {{\n"
        "  value: string;\n"
        "  metadata: {\n"
        "    name: string;\n"
        "    displayName: string;\n"
        "    description: string;\n"
        "    category: string;\n"
        "    tags: string[];\n"
        "    version: string;\n"
        "  };\n"
        "}\n"
        "\n"
        f"declare const label: {name};\n"
        "export default label;\n"
    )


def _table_cell(text: str) -> str:
    return str(text).replace('|', '\\|').replace('\n', ' ')


def render_readme(label: Label, owner_id: str, options: ManifestOptions = ManifestOptions()) -> str:
    """Render README.md with install/usage snippets and version history newest-first."""
    lines = [
        f"# {label.display_name}",
        "",
    ]
    if label.description:
        lines += [label.description, ""]

    lines += [
        "## Installation",
        "",
        "```bash",
        f"npm install {label.package_name}",
        "```",
        "",
        "## Usage",
        "",
        "```javascript",
        f"import label from '{label.package_name}';",
        "",
        f"console.log(label.value); // {js_string(label.value)}",
        "```",
        "",
        "## Label Information",
        "",
        "| Field | Value |",
        "| --- | --- |",
        f"| Name | {_table_cell(label.name)} |",
        f"| Category | {_table_cell(label.category)} |",
        f"| Version | {_table_cell(label.version)} |",
        f"| Tags | {_table_cell(', '.join(label.tags))} |",
        f"| Owner | {_table_cell(owner_id)} |",
        "",
        "## Version History",
        "",
    ]

    if label.versions:
        history = []
        for entry in reversed(label.versions):
            history.append("\n".join([
                f"### {entry.version}",
                f"- {entry.changelog or 'No changelog'}",
                f"- Released: {entry.published_at.date().isoformat()}",
            ]))
        lines.append("\n\n".join(history))
    else:
        lines.append("No published versions yet.")

    lines += [
        "",
        "## License",
        "",
        options.license,
        "",
        "---",
        "",
        f"Generated with [Taggr]({options.homepage_url}) - Create Once, Use Everywhere",
        "",
    ]
    return "\n".join(lines)


def build_artifact_set(label: Label, owner_id: str, options: ManifestOptions = ManifestOptions()) -> PackageArtifactSet:
    """Render every artifact for ``label``."""
    return PackageArtifactSet(
        manifest=build_manifest(label, owner_id, options),
        entry_module=render_entry_module(label),
        type_declaration=render_type_declaration(label),
        readme=render_readme(label, owner_id, options),
    )
