"""Manifest data model for VibeOS."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ManifestError(ValueError):
    """Raised when a manifest document is missing fields or has the wrong shape."""
    pass


class Phase(str, Enum):
    PENDING = "Pending"
    RECONCILING = "Reconciling"
    READY = "Ready"
    FAILED = "Failed"

    def __str__(self) -> str:
        return self.value


@dataclass
class Metadata:
    name: str
    version: str


@dataclass
class TechConstraints:
    framework: str
    language: str
    testing: List[str]


@dataclass
class FunctionalSpec:
    states: List[str]
    behaviors: List[str]
    inputs: Optional[List[str]] = None


@dataclass
class VisualSpec:
    elements: List[str]
    style: Optional[str] = None


@dataclass
class ManifestSpec:
    intent: str
    constraints: TechConstraints
    functional_spec: FunctionalSpec
    visual_spec: Optional[VisualSpec] = None


@dataclass
class ManifestStatus:
    """Mutable status block. The engine owns it for the duration of a run."""
    phase: Phase = Phase.PENDING
    current_loop: int = 0
    last_error: Optional[str] = None
    diff: Optional[int] = None


@dataclass
class Manifest:
    metadata: Metadata
    spec: ManifestSpec
    status: ManifestStatus = field(default_factory=ManifestStatus)

    @property
    def name(self) -> str:
        return self.metadata.name

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Manifest":
        if not isinstance(data, dict):
            raise ManifestError("manifest must be a mapping")
        meta = _section(data, "metadata")
        spec = _section(data, "spec")
        constraints = _section(spec, "constraints", path="spec")
        functional = _section(spec, "functionalSpec", "functional_spec", path="spec")
        visual_raw = _pick(spec, "visualSpec", "visual_spec")
        visual = None
        if visual_raw is not None:
            if not isinstance(visual_raw, dict):
                raise ManifestError("spec.visualSpec must be a mapping")
            visual = VisualSpec(
                elements=_str_list(visual_raw, "elements", "spec.visualSpec"),
                style=_optional_str(visual_raw, "style", "spec.visualSpec"),
            )
        inputs = _pick(functional, "inputs")
        manifest = cls(
            metadata=Metadata(
                name=_str(meta, "name", "metadata"),
                version=_str(meta, "version", "metadata"),
            ),
            spec=ManifestSpec(
                intent=_str(spec, "intent", "spec"),
                constraints=TechConstraints(
                    framework=_str(constraints, "framework", "spec.constraints"),
                    language=_str(constraints, "language", "spec.constraints"),
                    testing=_str_list(constraints, "testing", "spec.constraints"),
                ),
                functional_spec=FunctionalSpec(
                    states=_str_list(functional, "states", "spec.functionalSpec"),
                    behaviors=_str_list(functional, "behaviors", "spec.functionalSpec"),
                    inputs=_str_list(functional, "inputs", "spec.functionalSpec") if inputs is not None else None,
                ),
                visual_spec=visual,
            ),
        )
        status_raw = _pick(data, "status")
        if status_raw is not None:
            manifest.status = _parse_status(status_raw)
        return manifest

    def to_dict(self) -> Dict[str, Any]:
        spec: Dict[str, Any] = {
            "intent": self.spec.intent,
            "constraints": {
                "framework": self.spec.constraints.framework,
                "language": self.spec.constraints.language,
                "testing": list(self.spec.constraints.testing),
            },
            "functionalSpec": {
                "states": list(self.spec.functional_spec.states),
                "behaviors": list(self.spec.functional_spec.behaviors),
            },
        }
        if self.spec.functional_spec.inputs is not None:
            spec["functionalSpec"]["inputs"] = list(self.spec.functional_spec.inputs)
        if self.spec.visual_spec is not None:
            visual: Dict[str, Any] = {"elements": list(self.spec.visual_spec.elements)}
            if self.spec.visual_spec.style:
                visual["style"] = self.spec.visual_spec.style
            spec["visualSpec"] = visual
        status: Dict[str, Any] = {
            "phase": self.status.phase.value,
            "currentLoop": self.status.current_loop,
        }
        if self.status.last_error is not None:
            status["lastError"] = self.status.last_error
        if self.status.diff is not None:
            status["diff"] = self.status.diff
        return {
            "metadata": {"name": self.metadata.name, "version": self.metadata.version},
            "spec": spec,
            "status": status,
        }


def _pick(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _section(data: Dict[str, Any], *keys: str, path: str = "") -> Dict[str, Any]:
    value = _pick(data, *keys)
    label = f"{path}.{keys[0]}" if path else keys[0]
    if value is None:
        raise ManifestError(f"missing required section: {label}")
    if not isinstance(value, dict):
        raise ManifestError(f"{label} must be a mapping")
    return value


def _str(data: Dict[str, Any], key: str, path: str) -> str:
    value = data.get(key)
    if value is None:
        raise ManifestError(f"missing required field: {path}.{key}")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # YAML reads `version: 1.0` as a float
        return str(value)
    if not isinstance(value, str):
        raise ManifestError(f"{path}.{key} must be a string")
    return value


def _optional_str(data: Dict[str, Any], key: str, path: str) -> Optional[str]:
    if data.get(key) is None:
        return None
    return _str(data, key, path)


def _str_list(data: Dict[str, Any], key: str, path: str) -> List[str]:
    value = data.get(key)
    if value is None:
        raise ManifestError(f"missing required field: {path}.{key}")
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ManifestError(f"{path}.{key} must be a list of strings")
    return list(value)


def _parse_status(raw: Any) -> ManifestStatus:
    if not isinstance(raw, dict):
        raise ManifestError("status must be a mapping")
    phase_raw = raw.get("phase", Phase.PENDING.value)
    try:
        phase = Phase(phase_raw)
    except (ValueError, TypeError):
        raise ManifestError(f"status.phase must be one of {[p.value for p in Phase]}, got {phase_raw!r}")
    current_loop = _pick(raw, "currentLoop", "current_loop") or 0
    diff = raw.get("diff")
    if not isinstance(current_loop, int) or isinstance(current_loop, bool):
        raise ManifestError("status.currentLoop must be an integer")
    if diff is not None and (not isinstance(diff, int) or isinstance(diff, bool)):
        raise ManifestError("status.diff must be an integer")
    last_error = _pick(raw, "lastError", "last_error")
    return ManifestStatus(
        phase=phase,
        current_loop=current_loop,
        last_error=str(last_error) if last_error is not None else None,
        diff=diff,
    )
