"""Manifest file loader (YAML or JSON)."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict
import json
import yaml

from vibeos.manifest import Manifest, ManifestError

SUPPORTED_SUFFIXES = {".yaml", ".yml", ".json"}


def read_manifest_document(path: Path) -> Dict[str, Any]:
    path = Path(path).expanduser()
    if not path.exists():
        raise ManifestError(f"manifest not found: {path}")
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ManifestError(f"unsupported manifest format '{suffix}' (expected .yaml, .yml or .json)")
    text = path.read_text(encoding="utf-8")
    try:
        if suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise ManifestError(f"could not parse {path.name}: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError(f"{path.name} does not contain a manifest mapping")
    return data


def load_manifest(path: Path) -> Manifest:
    return Manifest.from_dict(read_manifest_document(path))
