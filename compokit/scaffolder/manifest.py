"""``package.json`` handling: parsing, deep merge and serialisation.

When a template ships a manifest and the target already has one, the two
are merged field by field instead of the template overwriting the file.
Values already present in the destination always win, except that nested
objects are merged recursively.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

from .errors import ManifestParseError, ScaffoldIOError


MANIFEST_FILENAME = "package.json"

# JSON value space: objects, arrays and scalars.
ManifestValue = Union[
    dict[str, "ManifestValue"], list["ManifestValue"], str, int, float, bool, None
]
Manifest = dict[str, ManifestValue]


def merge_manifests(destination: Manifest, template: Manifest) -> Manifest:
    """Return *destination* with the fields of *template* merged in.

    * Keys missing from *destination* are appended with the template value.
    * Keys holding objects on both sides are merged recursively.
    * Any other collision keeps the destination value, silently.

    Neither argument is mutated.  Merging a document with itself yields an
    equal document.
    """
    merged: Manifest = dict(destination)
    for key, template_value in template.items():
        if key not in merged:
            merged[key] = _copy_value(template_value)
            continue
        existing = merged[key]
        if isinstance(existing, dict) and isinstance(template_value, dict):
            merged[key] = merge_manifests(existing, template_value)
    return merged


def _copy_value(value: ManifestValue) -> ManifestValue:
    if isinstance(value, dict):
        return {k: _copy_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_copy_value(v) for v in value]
    return value


def parse_manifest(content: str | bytes, *, path: str | Path, side: str) -> Manifest:
    """Parse manifest *content* read from *path*.

    Raises:
        ManifestParseError: If the content is not valid UTF-8 JSON or its
            root is not an object.
    """
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ManifestParseError(path, side, str(exc)) from exc
    if not isinstance(data, dict):
        raise ManifestParseError(
            path, side, f"expected a JSON object, got {type(data).__name__}"
        )
    return data


def load_manifest(path: str | Path, *, side: str = "destination") -> Manifest:
    """Read and parse the manifest at *path*."""
    file_path = Path(path)
    try:
        raw = file_path.read_bytes()
    except OSError as exc:
        raise ScaffoldIOError(file_path, "read", exc.strerror or str(exc)) from exc
    return parse_manifest(raw, path=file_path, side=side)


def dump_manifest(manifest: Manifest) -> str:
    """Serialise *manifest* as indented JSON with a trailing newline.

    Key order is preserved as encountered.
    """
    return json.dumps(manifest, indent=2, ensure_ascii=False) + "\n"


def initial_manifest(name: str, version: str = "0.0.0") -> Manifest:
    """Return the manifest written to a target before templates are rendered."""
    return {"name": name, "version": version}


def merge_manifest_files(destination: str | Path, template: str | Path) -> str:
    """Merge the manifest file *template* into the file *destination*.

    Returns the serialised merged document; writing it is left to the
    caller so the write can be made atomic.
    """
    dest_doc = load_manifest(destination, side="destination")
    template_doc = load_manifest(template, side="template")
    return dump_manifest(merge_manifests(dest_doc, template_doc))
