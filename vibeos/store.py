"""In-memory store for manifests and their loop histories."""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional
import threading

from vibeos.ledger import LoopResult
from vibeos.manifest import Manifest


class ManifestBusyError(RuntimeError):
    """Raised when a reconciliation is already running for a manifest."""
    pass


@dataclass
class ManifestStore:
    manifests: Dict[str, Manifest] = field(default_factory=dict)
    histories: Dict[str, List[LoopResult]] = field(default_factory=dict)
    _locks: Dict[str, threading.Lock] = field(default_factory=dict, repr=False)
    _guard: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def set_manifest(self, manifest_id: str, manifest: Manifest) -> None:
        with self._guard:
            self.manifests[manifest_id] = manifest
            self._locks.setdefault(manifest_id, threading.Lock())

    def get_manifest(self, manifest_id: str) -> Optional[Manifest]:
        return self.manifests.get(manifest_id)

    def delete_manifest(self, manifest_id: str) -> None:
        with self._guard:
            self.manifests.pop(manifest_id, None)
            self.histories.pop(manifest_id, None)
            self._locks.pop(manifest_id, None)

    def list_manifests(self) -> List[str]:
        return list(self.manifests.keys())

    def manifest_count(self) -> int:
        return len(self.manifests)

    def append_loop_result(self, manifest_id: str, result: LoopResult) -> None:
        with self._guard:
            self.histories.setdefault(manifest_id, []).append(result)

    def get_loop_history(self, manifest_id: str) -> List[LoopResult]:
        return list(self.histories.get(manifest_id, []))

    def clear_loop_history(self, manifest_id: str) -> None:
        with self._guard:
            self.histories.pop(manifest_id, None)

    def clear(self) -> None:
        with self._guard:
            self.manifests.clear()
            self.histories.clear()
            self._locks.clear()

    @contextmanager
    def reserve(self, manifest_id: str) -> Iterator[Manifest]:
        """Hold exclusive write access to a manifest for one reconciliation run."""
        with self._guard:
            manifest = self.manifests.get(manifest_id)
            if manifest is None:
                raise KeyError(manifest_id)
            lock = self._locks.setdefault(manifest_id, threading.Lock())
        if not lock.acquire(blocking=False):
            raise ManifestBusyError(f"reconciliation already running for {manifest_id}")
        try:
            yield manifest
        finally:
            lock.release()
