"""Agents that fill the Specifier, Coder and Auditor roles."""
from vibeos.agents.auditor import AuditorAgent
from vibeos.agents.base import AgentContext, AgentExecutionError, Capability
from vibeos.agents.coder import CoderAgent
from vibeos.agents.specifier import SpecifierAgent

__all__ = [
    "AgentContext",
    "AgentExecutionError",
    "AuditorAgent",
    "Capability",
    "CoderAgent",
    "SpecifierAgent",
]
