"""Crash-loop (stagnation) detection over the loop ledger."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence

from vibeos.ledger import LoopResult

CRASH_LOOP_MESSAGE = "Crash loop detected: no improvement in recent loops"


@dataclass(frozen=True)
class CrashLoopConfig:
    max_total_loops: int = 10
    max_stagnation_count: int = 5
    stagnation_threshold: float = 0.1  # minimum fractional improvement, 0-1

    def __post_init__(self) -> None:
        if self.max_total_loops < 1:
            raise ValueError(f"max_total_loops must be >= 1, got {self.max_total_loops}")
        if self.max_stagnation_count < 1:
            raise ValueError(f"max_stagnation_count must be >= 1, got {self.max_stagnation_count}")
        if not 0.0 <= self.stagnation_threshold <= 1.0:
            raise ValueError(f"stagnation_threshold must be within [0, 1], got {self.stagnation_threshold}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CrashLoopConfig":
        defaults = cls()
        return cls(
            max_total_loops=int(data.get("max_total_loops", defaults.max_total_loops)),
            max_stagnation_count=int(data.get("max_stagnation_count", defaults.max_stagnation_count)),
            stagnation_threshold=float(data.get("stagnation_threshold", defaults.stagnation_threshold)),
        )


def detect_crash_loop(history: Sequence[LoopResult], config: CrashLoopConfig) -> bool:
    """Return True when the trailing window shows no sufficient improvement.

    The window is the last `max_stagnation_count` entries. Any consecutive pair
    whose fractional improvement reaches `stagnation_threshold` counts as
    progress. Pairs starting from a zero diff are skipped. The -1 sentinel for
    unparseable audits is not special-cased.
    """
    window_size = config.max_stagnation_count
    if len(history) < window_size:
        return False
    recent = list(history)[-window_size:]
    for prev, curr in zip(recent, recent[1:]):
        if prev.diff == 0:
            continue
        improvement = (prev.diff - curr.diff) / prev.diff
        if improvement >= config.stagnation_threshold:
            return False
    return True
