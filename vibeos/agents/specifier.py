"""Specifier agent: writes failing tests from the manifest before any code exists."""
from __future__ import annotations

from vibeos.agents.base import AgentContext, CompletionClient, call_llm
from vibeos.agents.prompts import SPECIFIER_SYSTEM_PROMPT, build_specifier_prompt


class SpecifierAgent:
    name = "SpecifierAgent"

    def __init__(self, llm: CompletionClient) -> None:
        self.llm = llm

    def execute(self, context: AgentContext) -> str:
        prompt = build_specifier_prompt(context.manifest, context.current_code)
        return call_llm(self.llm, self.name, SPECIFIER_SYSTEM_PROMPT, prompt)
