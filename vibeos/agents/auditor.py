"""Auditor agent: scores the current implementation against the manifest.

The reply is normalized to compact JSON so the engine can read `totalDiff`.
Logic diff counts failing unit tests, visual diff counts failing E2E tests,
and total diff is their sum.
"""
from __future__ import annotations

import json

from vibeos.agents.base import AgentContext, AgentExecutionError, CompletionClient, call_llm, parse_json_payload
from vibeos.agents.prompts import AUDITOR_SYSTEM_PROMPT, build_auditor_prompt


class AuditorAgent:
    name = "AuditorAgent"

    def __init__(self, llm: CompletionClient) -> None:
        self.llm = llm

    def execute(self, context: AgentContext) -> str:
        prompt = build_auditor_prompt(context.manifest, context.current_code, context.loop_number)
        response = call_llm(self.llm, self.name, AUDITOR_SYSTEM_PROMPT, prompt)
        report = parse_json_payload(response)
        if report is None:
            raise AgentExecutionError(f"{self.name} execution failed: response is not a JSON object")
        return json.dumps(report, separators=(",", ":"))
