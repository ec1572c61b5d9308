"""Loop ledger and result records for reconciliation runs."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Tuple

from vibeos.manifest import Phase

# Sentinel divergence for audit output that could not be parsed.
UNPARSEABLE_DIFF = -1


@dataclass(frozen=True)
class LoopResult:
    loop_number: int
    phase: str
    success: bool
    diff: int
    output: Optional[str] = None
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now().astimezone())

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "loopNumber": self.loop_number,
            "phase": self.phase,
            "success": self.success,
            "diff": self.diff,
            "timestamp": self.timestamp.isoformat(timespec="seconds"),
        }
        if self.output is not None:
            payload["output"] = self.output
        if self.error is not None:
            payload["error"] = self.error
        return payload


class LoopLedger:
    """Append-only, ordered record of loop results for one run.

    Loop numbers must start at 1 and increase by exactly one per entry.
    """

    def __init__(self) -> None:
        self._entries: List[LoopResult] = []

    def append(self, result: LoopResult) -> None:
        expected = len(self._entries) + 1
        if result.loop_number != expected:
            raise ValueError(f"ledger expected loop {expected}, got {result.loop_number}")
        self._entries.append(result)

    def entries(self) -> Tuple[LoopResult, ...]:
        return tuple(self._entries)

    def diffs(self) -> List[int]:
        return [entry.diff for entry in self._entries]

    def last(self) -> Optional[LoopResult]:
        return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LoopResult]:
        return iter(tuple(self._entries))

    def __getitem__(self, index):
        return self._entries[index]


@dataclass(frozen=True)
class ReconciliationResult:
    success: bool
    final_phase: Phase
    total_loops: int
    loop_history: Tuple[LoopResult, ...]
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": self.success,
            "finalPhase": self.final_phase.value,
            "totalLoops": self.total_loops,
            "loopHistory": [entry.to_dict() for entry in self.loop_history],
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload
