"""Base interface for coding-agent variants (claude, codex, ...)."""

import shlex
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Dict

from ..core.config import AgentMode, ModelConfig
from ..core.models import LabelOptions

ASK_MODE_PREFIX = (
    "Research the repository and answer the user's questions. "
    "Do NOT make any changes to any files in the repository.\n\n"
)


@dataclass
class AgentCommandConfig:
    """Shell command plus PR labelling defaults for one agent variant."""
    command: str
    error_prefix: str
    label_name: str
    label_color: str
    label_description: str

    @property
    def label(self) -> LabelOptions:
        return LabelOptions(
            name=self.label_name,
            color=self.label_color,
            description=self.label_description,
        )


class AgentVariant(ABC):
    """Capability contract implemented by each supported coding agent.

    Subclasses declare their identity as class attributes and only build the
    CLI invocation and the environment the CLI needs.
    """

    agent_type: ClassVar[str]
    display_name: ClassVar[str]
    default_provider: ClassVar[str]
    default_model: ClassVar[str]
    label_color: ClassVar[str]

    def __init__(self, model: ModelConfig):
        self._model = model

    @property
    def model_name(self) -> str:
        return self._model.model or self.default_model

    def model_config(self) -> ModelConfig:
        """Model settings with variant defaults filled in (used by the summarizer)."""
        return self._model.model_copy(update={
            "provider": self._model.provider or self.default_provider,
            "model": self.model_name,
        })

    def default_label(self) -> LabelOptions:
        """Label attached to pull requests opened from this agent's work."""
        return LabelOptions(
            name=self.agent_type,
            color=self.label_color,
            description=f"Generated by {self.display_name} AI agent",
        )

    def command_config(self, prompt: str, mode: AgentMode = "code") -> AgentCommandConfig:
        instruction = ASK_MODE_PREFIX + prompt if mode == "ask" else prompt
        label = self.default_label()
        return AgentCommandConfig(
            command=self.build_command(shlex.quote(instruction), mode),
            error_prefix=self.display_name,
            label_name=label.name,
            label_color=label.color,
            label_description=label.description,
        )

    @abstractmethod
    def build_command(self, quoted_prompt: str, mode: AgentMode) -> str:
        """Return the shell command running the agent CLI on an already-quoted prompt."""
        pass

    @abstractmethod
    def environment_variables(self) -> Dict[str, str]:
        """Environment the agent CLI needs inside the sandbox (API keys, endpoints)."""
        pass
