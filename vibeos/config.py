"""Configuration loader for VibeOS."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict
import copy
import os
import yaml

from vibeos.stagnation import CrashLoopConfig

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "default.yaml"
USER_CONFIG_PATH = Path.home() / ".config" / "vibeos" / "config.yaml"

DEFAULTS: Dict[str, Any] = {
    "reconcile": {
        "max_total_loops": 10,
        "max_stagnation_count": 5,
        "stagnation_threshold": 0.1,
    },
    "llm": {
        "model": "claude-3-5-sonnet-20241022",
        "max_tokens": 4096,
        "timeout_seconds": 60,
        "base_url": "https://api.anthropic.com/v1",
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8093,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _env_int(name: str) -> int | None:
    value = os.getenv(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _env_float(name: str) -> float | None:
    value = os.getenv(name)
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def load_config(
    default_path: Path | None = None,
    user_path: Path | None = None,
) -> Dict[str, Any]:
    data: Dict[str, Any] = copy.deepcopy(DEFAULTS)
    for path in (default_path or DEFAULT_CONFIG_PATH, user_path or USER_CONFIG_PATH):
        if path.exists():
            override = yaml.safe_load(path.read_text()) or {}
            data = _deep_merge(data, override)

    # Environment overrides - Reconcile policy
    max_loops = _env_int("VIBEOS_MAX_LOOPS")
    if max_loops is not None:
        data.setdefault("reconcile", {})["max_total_loops"] = max_loops
    stagnation_count = _env_int("VIBEOS_STAGNATION_COUNT")
    if stagnation_count is not None:
        data.setdefault("reconcile", {})["max_stagnation_count"] = stagnation_count
    threshold = _env_float("VIBEOS_STAGNATION_THRESHOLD")
    if threshold is not None:
        data.setdefault("reconcile", {})["stagnation_threshold"] = threshold

    # Environment overrides - Model
    model = os.getenv("VIBEOS_MODEL")
    if model:
        data.setdefault("llm", {})["model"] = model

    # Environment overrides - Server
    host = os.getenv("VIBEOS_HOST")
    if host:
        data.setdefault("server", {})["host"] = host
    port = _env_int("VIBEOS_PORT")
    if port is not None:
        data.setdefault("server", {})["port"] = port

    # Environment overrides - Data directory
    data_dir = os.getenv("VIBEOS_DATA_DIR")
    if data_dir:
        data["data_dir"] = data_dir

    return data


@dataclass
class Config:
    raw: Dict[str, Any]

    @property
    def reconcile(self) -> Dict[str, Any]:
        return self.raw.get("reconcile", {})

    @property
    def crash_loop(self) -> CrashLoopConfig:
        return CrashLoopConfig.from_dict(self.reconcile)

    @property
    def llm(self) -> Dict[str, Any]:
        return self.raw.get("llm", {})

    @property
    def server(self) -> Dict[str, Any]:
        return self.raw.get("server", {})

    @property
    def data_dir(self) -> Path:
        default = str(Path.home() / ".vibeos")
        return Path(self.raw.get("data_dir", default)).expanduser()

    def run_dir(self, run_id: str) -> Path:
        return self.data_dir / "runs" / run_id


def get_config() -> Config:
    return Config(load_config())
