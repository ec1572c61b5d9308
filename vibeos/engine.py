"""Reconciliation engine: drives Specifier, Coder and Auditor until the manifest converges."""
from __future__ import annotations

from typing import Any, Dict, Optional
import json
import logging

from vibeos.agents.base import AgentContext, Capability
from vibeos.audit import AuditLog
from vibeos.ledger import UNPARSEABLE_DIFF, LoopLedger, LoopResult, ReconciliationResult
from vibeos.manifest import Manifest, Phase
from vibeos.stagnation import CRASH_LOOP_MESSAGE, CrashLoopConfig, detect_crash_loop
from vibeos.state_machine import StateMachine

MAX_LOOPS_MESSAGE = "Max loops exceeded"
NO_CONVERGENCE_MESSAGE = "Maximum loops exceeded without convergence"

logger = logging.getLogger(__name__)


def parse_audit_output(output: str) -> int:
    """Read `totalDiff` from auditor output, or UNPARSEABLE_DIFF if it cannot be read."""
    try:
        report = json.loads(output)
    except (TypeError, ValueError):
        return UNPARSEABLE_DIFF
    if not isinstance(report, dict):
        return UNPARSEABLE_DIFF
    diff = report.get("totalDiff")
    if isinstance(diff, bool):
        return UNPARSEABLE_DIFF
    if isinstance(diff, int):
        return diff
    if isinstance(diff, float) and diff.is_integer():
        return int(diff)
    return UNPARSEABLE_DIFF


class ReconciliationEngine:
    """Runs the Specifier -> Coder -> Auditor loop against one manifest at a time.

    Each `reconcile` call gets its own state machine and ledger. The manifest's
    status block is written in place and must not be touched by anyone else
    while the call is running.
    """

    def __init__(
        self,
        specifier: Capability,
        coder: Capability,
        auditor: Capability,
        config: CrashLoopConfig | None = None,
        audit: AuditLog | None = None,
    ) -> None:
        self.specifier = specifier
        self.coder = coder
        self.auditor = auditor
        self.config = config or CrashLoopConfig()
        self.audit = audit
        self.state_machine = StateMachine(self.config.max_total_loops)

    @classmethod
    def from_llm(cls, llm: Any, config: CrashLoopConfig | None = None, audit: AuditLog | None = None) -> "ReconciliationEngine":
        from vibeos.agents import AuditorAgent, CoderAgent, SpecifierAgent

        return cls(SpecifierAgent(llm), CoderAgent(llm), AuditorAgent(llm), config=config, audit=audit)

    def reconcile(self, manifest: Manifest) -> ReconciliationResult:
        ledger = LoopLedger()
        machine = StateMachine(self.config.max_total_loops)
        self.state_machine = machine
        current_code = ""
        current_loop = 0

        machine.transition(Phase.RECONCILING)
        manifest.status.phase = Phase.RECONCILING
        manifest.status.current_loop = 0
        manifest.status.last_error = None
        logger.info(f"Reconciling {manifest.name} (budget {self.config.max_total_loops} loops)")
        self._log("run.start", {
            "manifest": manifest.name,
            "version": manifest.metadata.version,
            "max_total_loops": self.config.max_total_loops,
            "max_stagnation_count": self.config.max_stagnation_count,
            "stagnation_threshold": self.config.stagnation_threshold,
        })

        while current_loop < self.config.max_total_loops:
            current_loop += 1
            machine.increment_loop()
            manifest.status.current_loop = current_loop

            try:
                loop_result, current_code = self.execute_loop(manifest, current_loop, ledger, current_code)
            except Exception as exc:
                error = str(exc) or type(exc).__name__
                logger.error(f"Loop {current_loop} of {manifest.name} failed: {error}")
                manifest.status.last_error = error
                return self._finish(manifest, Phase.FAILED, current_loop, ledger, error)

            ledger.append(loop_result)
            manifest.status.diff = loop_result.diff
            logger.info(f"Loop {current_loop}/{self.config.max_total_loops} of {manifest.name}: diff={loop_result.diff}")
            self._log("loop.complete", {
                "loop": current_loop,
                "diff": loop_result.diff,
                "success": loop_result.success,
            })

            next_phase = machine.check_transition(loop_result.diff, current_loop)
            if next_phase == Phase.READY:
                manifest.status.diff = 0
                return self._finish(manifest, Phase.READY, current_loop, ledger)
            if next_phase == Phase.FAILED:
                return self._finish(manifest, Phase.FAILED, current_loop, ledger, MAX_LOOPS_MESSAGE)

            if detect_crash_loop(ledger.entries(), self.config):
                return self._finish(manifest, Phase.FAILED, current_loop, ledger, CRASH_LOOP_MESSAGE)

        return self._finish(manifest, Phase.FAILED, current_loop, ledger, NO_CONVERGENCE_MESSAGE)

    def execute_loop(
        self,
        manifest: Manifest,
        loop_number: int,
        ledger: LoopLedger,
        current_code: str = "",
    ) -> tuple[LoopResult, str]:
        """Run one Specifier -> Coder -> Auditor pass and return its result and the new code."""
        history = ledger.entries()

        tests = self.specifier.execute(AgentContext(manifest, current_code, loop_number, history))
        logger.debug(f"Loop {loop_number}: specifier produced {len(tests)} chars")

        current_code = self.coder.execute(AgentContext(manifest, current_code, loop_number, history))
        logger.debug(f"Loop {loop_number}: coder produced {len(current_code)} chars")

        audit_output = self.auditor.execute(AgentContext(manifest, current_code, loop_number, history))
        diff = parse_audit_output(audit_output)
        if diff == UNPARSEABLE_DIFF:
            logger.warning(f"Loop {loop_number}: auditor output has no usable totalDiff")

        result = LoopResult(
            loop_number=loop_number,
            phase="auditor",
            success=diff == 0,
            diff=diff,
            output=audit_output,
        )
        return result, current_code

    def _finish(
        self,
        manifest: Manifest,
        phase: Phase,
        total_loops: int,
        ledger: LoopLedger,
        error: Optional[str] = None,
    ) -> ReconciliationResult:
        self.state_machine.transition(phase)
        manifest.status.phase = phase
        success = phase == Phase.READY
        if success:
            logger.info(f"{manifest.name} converged after {total_loops} loops")
            self._log("run.ready", {"total_loops": total_loops})
        else:
            logger.info(f"{manifest.name} failed after {total_loops} loops: {error}")
            self._log("run.failed", {"total_loops": total_loops, "error": error})
        return ReconciliationResult(
            success=success,
            final_phase=phase,
            total_loops=total_loops,
            loop_history=ledger.entries(),
            error=error,
        )

    def _log(self, event: str, data: Dict[str, Any]) -> None:
        if not self.audit:
            return
        try:
            self.audit.log(event, data)
        except OSError:
            logger.warning(f"Failed to write audit event {event}", exc_info=True)
