"""VibeOS: converge an implementation onto a declarative manifest."""
from vibeos.engine import ReconciliationEngine
from vibeos.ledger import LoopLedger, LoopResult, ReconciliationResult
from vibeos.manifest import Manifest, Phase
from vibeos.stagnation import CrashLoopConfig, detect_crash_loop
from vibeos.state_machine import StateMachine

__version__ = "0.1.0"

__all__ = [
    "CrashLoopConfig",
    "LoopLedger",
    "LoopResult",
    "Manifest",
    "Phase",
    "ReconciliationEngine",
    "ReconciliationResult",
    "StateMachine",
    "detect_crash_loop",
]
