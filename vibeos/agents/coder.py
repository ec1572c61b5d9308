"""Coder agent: generates the implementation that should make the tests pass."""
from __future__ import annotations

from vibeos.agents.base import AgentContext, AgentExecutionError, CompletionClient, call_llm
from vibeos.agents.prompts import CODER_SYSTEM_PROMPT, build_coder_prompt

INITIAL_FEEDBACK = "No test failures - generate initial implementation"


class CoderAgent:
    name = "CoderAgent"

    def __init__(self, llm: CompletionClient) -> None:
        self.llm = llm

    def execute(self, context: AgentContext) -> str:
        feedback = self.extract_test_failure(context)
        if not feedback and context.previous_results:
            raise AgentExecutionError("No test failure information available")
        prompt = build_coder_prompt(context.manifest, feedback or INITIAL_FEEDBACK, context.current_code)
        return call_llm(self.llm, self.name, CODER_SYSTEM_PROMPT, prompt)

    @staticmethod
    def extract_test_failure(context: AgentContext) -> str:
        """Return the latest auditor report, falling back to the last recorded error."""
        results = context.previous_results
        if not results:
            return ""
        for result in reversed(results):
            if result.phase == "auditor" and result.output:
                return result.output
        return results[-1].error or ""
