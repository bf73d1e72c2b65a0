"""Concrete agent variants and the closed registry used to pick one."""

from typing import Dict, Type

from ..core.config import AgentMode, ModelConfig
from ..errors import ConfigurationError
from .base import AgentVariant

# Provider -> environment variable holding its API key
PROVIDER_API_KEY_ENV = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
    "azure": "AZURE_OPENAI_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "google": "GOOGLE_API_KEY",
    "mistral": "MISTRAL_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
    "xai": "XAI_API_KEY",
    "groq": "GROQ_API_KEY",
}


class ClaudeAgent(AgentVariant):
    agent_type = "claude"
    display_name = "Claude"
    default_provider = "anthropic"
    default_model = "claude-sonnet-4-20250514"
    label_color = "FF6B35"

    def build_command(self, quoted_prompt: str, mode: AgentMode) -> str:
        tools = (
            "--disallowedTools Edit,MultiEdit,Write"
            if mode == "ask"
            else "--dangerously-skip-permissions"
        )
        return (
            f"echo {quoted_prompt} | claude -p {tools} "
            f"--output-format stream-json --verbose --model {self.model_name}"
        )

    def environment_variables(self) -> Dict[str, str]:
        env: Dict[str, str] = {}
        if self._model.oauth_token:
            env["CLAUDE_CODE_OAUTH_TOKEN"] = self._model.oauth_token
        if self._model.api_key:
            env["ANTHROPIC_API_KEY"] = self._model.api_key
        if self._model.base_url:
            env["ANTHROPIC_BASE_URL"] = self._model.base_url
        return env


class CodexAgent(AgentVariant):
    agent_type = "codex"
    display_name = "Codex"
    default_provider = "openai"
    default_model = "gpt-5"
    label_color = "10A37F"

    def build_command(self, quoted_prompt: str, mode: AgentMode) -> str:
        approval = "--sandbox read-only" if mode == "ask" else "--full-auto"
        return (
            f"codex exec {approval} --skip-git-repo-check "
            f"--model {self.model_name} {quoted_prompt}"
        )

    def environment_variables(self) -> Dict[str, str]:
        env: Dict[str, str] = {}
        if self._model.api_key:
            provider = self._model.provider or self.default_provider
            env[PROVIDER_API_KEY_ENV.get(provider, "OPENAI_API_KEY")] = self._model.api_key
        if self._model.base_url:
            env["OPENAI_BASE_URL"] = self._model.base_url
        return env


class OpenCodeAgent(AgentVariant):
    agent_type = "opencode"
    display_name = "OpenCode"
    default_provider = "anthropic"
    default_model = "claude-sonnet-4-20250514"
    label_color = "6366F1"

    def build_command(self, quoted_prompt: str, mode: AgentMode) -> str:
        provider = self._model.provider or self.default_provider
        return f"opencode run --model {provider}/{self.model_name} {quoted_prompt}"

    def environment_variables(self) -> Dict[str, str]:
        env: Dict[str, str] = {}
        if self._model.api_key:
            provider = self._model.provider or self.default_provider
            env_name = PROVIDER_API_KEY_ENV.get(provider)
            if env_name is None:
                raise ConfigurationError(f"Unsupported provider for OpenCode: {provider}")
            env[env_name] = self._model.api_key
        return env


class GeminiAgent(AgentVariant):
    agent_type = "gemini"
    display_name = "Gemini"
    default_provider = "gemini"
    default_model = "gemini-2.5-pro"
    label_color = "4285F4"

    def build_command(self, quoted_prompt: str, mode: AgentMode) -> str:
        auto_approve = "" if mode == "ask" else " --yolo"
        return f"gemini --model {self.model_name}{auto_approve} --prompt {quoted_prompt}"

    def environment_variables(self) -> Dict[str, str]:
        if not self._model.api_key:
            return {}
        return {"GEMINI_API_KEY": self._model.api_key}


class GrokAgent(AgentVariant):
    agent_type = "grok"
    display_name = "Grok"
    default_provider = "xai"
    default_model = "grok-4"
    label_color = "1DA1F2"

    def build_command(self, quoted_prompt: str, mode: AgentMode) -> str:
        return f"grok --model {self.model_name} --prompt {quoted_prompt}"

    def environment_variables(self) -> Dict[str, str]:
        env: Dict[str, str] = {}
        if self._model.api_key:
            env["GROK_API_KEY"] = self._model.api_key
        env["GROK_BASE_URL"] = self._model.base_url or "https://api.x.ai/v1"
        return env


AGENT_VARIANTS: Dict[str, Type[AgentVariant]] = {
    cls.agent_type: cls
    for cls in (ClaudeAgent, CodexAgent, OpenCodeAgent, GeminiAgent, GrokAgent)
}


def create_agent_variant(agent_type: str, model: ModelConfig) -> AgentVariant:
    """Instantiate the variant for ``agent_type``; the set of types is fixed."""
    variant_cls = AGENT_VARIANTS.get(agent_type)
    if variant_cls is None:
        raise ConfigurationError(
            f"Unsupported agent type: {agent_type}. "
            f"Expected one of: {', '.join(sorted(AGENT_VARIANTS))}"
        )
    return variant_cls(model)
