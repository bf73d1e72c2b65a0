"""Coding-agent variants."""

from .base import AgentCommandConfig, AgentVariant
from .variants import (
    AGENT_VARIANTS,
    ClaudeAgent,
    CodexAgent,
    GeminiAgent,
    GrokAgent,
    OpenCodeAgent,
    create_agent_variant,
)

__all__ = [
    "AgentCommandConfig",
    "AgentVariant",
    "AGENT_VARIANTS",
    "ClaudeAgent",
    "CodexAgent",
    "GeminiAgent",
    "GrokAgent",
    "OpenCodeAgent",
    "create_agent_variant",
]
