"""Phase state machine for a reconciliation run."""
from __future__ import annotations

from typing import Optional

from vibeos.manifest import Phase


class StateMachine:
    """Tracks the run phase and loop count, and classifies the next phase.

    Ready and Failed are terminal. The machine itself does not enforce that;
    `transition` overwrites unconditionally and the engine decides legality.
    """

    def __init__(self, max_loops: int = 10) -> None:
        self.max_loops = max_loops
        self.current_phase = Phase.PENDING
        self.loop_count = 0

    def transition(self, phase: Phase) -> None:
        self.current_phase = phase

    def check_transition(self, diff: int, current_loop: Optional[int] = None) -> Phase:
        """Return the phase implied by `diff` at `current_loop`.

        Pure: never writes internal state. When `current_loop` is omitted the
        internal loop counter is used.
        """
        loop = self.loop_count if current_loop is None else current_loop
        if diff == 0:
            return Phase.READY
        if loop >= self.max_loops:
            return Phase.FAILED
        return Phase.RECONCILING

    def increment_loop(self) -> None:
        self.loop_count += 1

    def get_loop_count(self) -> int:
        return self.loop_count

    def get_max_loops(self) -> int:
        return self.max_loops

    def reset(self) -> None:
        self.current_phase = Phase.PENDING
        self.loop_count = 0
