"""Command line interface for VibeOS."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from vibeos.audit import AuditLog, new_run_id
from vibeos.config import Config, get_config
from vibeos.engine import ReconciliationEngine
from vibeos.ledger import ReconciliationResult
from vibeos.loader import load_manifest
from vibeos.manifest import ManifestError
from vibeos.models.anthropic import AnthropicClient
from vibeos.stagnation import CrashLoopConfig


def _print(obj: Any) -> None:
    print(json.dumps(obj, indent=2))


def _crash_loop_config(args: argparse.Namespace, config: Config) -> CrashLoopConfig:
    raw = dict(config.reconcile)
    if args.max_loops is not None:
        raw["max_total_loops"] = args.max_loops
    if args.stagnation_count is not None:
        raw["max_stagnation_count"] = args.stagnation_count
    if args.stagnation_threshold is not None:
        raw["stagnation_threshold"] = args.stagnation_threshold
    return CrashLoopConfig.from_dict(raw)


def _summary(result: ReconciliationResult) -> str:
    lines = [f"phase={result.final_phase.value} loops={result.total_loops} success={result.success}"]
    for entry in result.loop_history:
        lines.append(f"  loop {entry.loop_number}: diff={entry.diff}")
    if result.error:
        lines.append(f"error: {result.error}")
    return "\n".join(lines)


def cmd_reconcile(args: argparse.Namespace) -> int:
    config = get_config()
    try:
        manifest = load_manifest(Path(args.manifest))
        crash_loop = _crash_loop_config(args, config)
    except (ManifestError, ValueError) as exc:
        print(f"[vibeos] {exc}", file=sys.stderr)
        return 2
    llm_cfg = dict(config.llm)
    if args.model:
        llm_cfg["model"] = args.model
    llm = AnthropicClient.from_config(llm_cfg)
    if not llm.available:
        print("[vibeos] ANTHROPIC_API_KEY not set", file=sys.stderr)
        return 2
    run_id = new_run_id()
    audit = AuditLog(config.run_dir(run_id) / "audit.jsonl")
    engine = ReconciliationEngine.from_llm(llm, config=crash_loop, audit=audit)
    print(f"[vibeos] run_id={run_id}", file=sys.stderr)
    result = engine.reconcile(manifest)
    if args.json:
        _print({"run_id": run_id, "result": result.to_dict(), "manifest": manifest.to_dict()})
    else:
        print(_summary(result))
    return 0 if result.success else 1


def cmd_validate(args: argparse.Namespace) -> int:
    try:
        manifest = load_manifest(Path(args.manifest))
    except ManifestError as exc:
        print(f"[vibeos] invalid manifest: {exc}", file=sys.stderr)
        return 2
    _print(manifest.to_dict())
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    config = get_config()
    _print({**config.raw, "data_dir": str(config.data_dir)})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vibeos")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command")

    reconcile = sub.add_parser("reconcile", help="Run the reconciliation loop for a manifest")
    reconcile.add_argument("-m", "--manifest", required=True)
    reconcile.add_argument("--max-loops", type=int)
    reconcile.add_argument("--stagnation-count", type=int)
    reconcile.add_argument("--stagnation-threshold", type=float)
    reconcile.add_argument("--model")
    reconcile.add_argument("--json", action="store_true")

    validate = sub.add_parser("validate", help="Load and normalize a manifest")
    validate.add_argument("-m", "--manifest", required=True)

    sub.add_parser("config", help="Print the effective configuration")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command == "reconcile":
        code = cmd_reconcile(args)
    elif args.command == "validate":
        code = cmd_validate(args)
    elif args.command == "config":
        code = cmd_config(args)
    else:
        parser.print_help()
        code = 0
    raise SystemExit(code)


if __name__ == "__main__":
    main()
