#!/usr/bin/env python3
"""
VibeOS Demo -- reconciliation loop with scripted agents.

Run:
    python examples/demo.py

No model access needed: the auditor replays a fixed diff sequence so the
three terminal outcomes (converged, crash loop, budget exhausted) can be seen.
"""
from __future__ import annotations

import json
import sys
from pathlib import Path

# Ensure vibeos is importable when running from the repo root.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from vibeos.agents import AgentContext
from vibeos.engine import ReconciliationEngine
from vibeos.loader import load_manifest
from vibeos.stagnation import CrashLoopConfig

MANIFEST_PATH = Path(__file__).resolve().parent / "counter.yaml"

SCENARIOS = [
    {"description": "Converges on the third loop", "diffs": [4, 2, 0]},
    {"description": "Stalls at the same diff and trips the crash-loop detector", "diffs": [5] * 10},
    {"description": "Oscillates without converging until the budget runs out", "diffs": [9, 10] * 5},
]


class EchoAgent:
    def __init__(self, label: str) -> None:
        self.label = label

    def execute(self, context: AgentContext) -> str:
        return f"// {self.label} output for loop {context.loop_number}"


class ReplayAuditor:
    def __init__(self, diffs: list[int]) -> None:
        self.diffs = list(diffs)

    def execute(self, context: AgentContext) -> str:
        diff = self.diffs[min(context.loop_number, len(self.diffs)) - 1]
        return json.dumps({"totalDiff": diff})


def run_demo() -> None:
    for scenario in SCENARIOS:
        manifest = load_manifest(MANIFEST_PATH)
        engine = ReconciliationEngine(
            EchoAgent("specifier"),
            EchoAgent("coder"),
            ReplayAuditor(scenario["diffs"]),
            config=CrashLoopConfig(max_total_loops=10, max_stagnation_count=5, stagnation_threshold=0.1),
        )
        result = engine.reconcile(manifest)
        print(f"== {scenario['description']}")
        print(f"   phase={result.final_phase.value} loops={result.total_loops} error={result.error}")
        print(f"   diffs={[entry.diff for entry in result.loop_history]}")


if __name__ == "__main__":
    run_demo()
