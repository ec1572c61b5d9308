"""Capability contract shared by the Specifier, Coder and Auditor agents."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Tuple, runtime_checkable
import json
import logging
import re

from vibeos.ledger import LoopResult
from vibeos.manifest import Manifest

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:[a-zA-Z0-9_-]+)?\s*([\s\S]*?)```")


class AgentExecutionError(Exception):
    """Raised when an agent cannot produce usable output."""
    pass


@dataclass(frozen=True)
class AgentContext:
    manifest: Manifest
    current_code: str
    loop_number: int
    previous_results: Tuple[LoopResult, ...] = ()


@runtime_checkable
class Capability(Protocol):
    def execute(self, context: AgentContext) -> str:
        ...


class CompletionClient(Protocol):
    def complete(self, system: str, prompt: str) -> Any:
        ...


def call_llm(llm: CompletionClient, agent: str, system: str, prompt: str) -> str:
    """Run one completion and return its text, raising on transport or empty output."""
    result = llm.complete(system, prompt)
    if not result.ok:
        logger.warning(f"{agent} model call failed: {result.error}")
        raise AgentExecutionError(f"{agent} execution failed: {result.error or 'unknown error'}")
    text = (result.text or "").strip()
    if not text:
        raise AgentExecutionError(f"{agent} execution failed: empty response")
    return text


def parse_json_payload(text: str) -> Optional[Dict[str, Any]]:
    """Extract a JSON object from model output, tolerating code fences and chatter."""
    if not text:
        return None
    candidates = [text.strip()]
    fenced = _FENCE_RE.search(text)
    if fenced:
        candidates.append(fenced.group(1).strip())
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start:end + 1])
    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(data, dict):
            return data
    return None
