"""Base interface for the model-backed metadata summarizer."""

from abc import ABC, abstractmethod

from pydantic import BaseModel

from ..core.config import ModelConfig


class CommitMessage(BaseModel):
    """Commit message synthesized from a diff."""
    commit_message: str


class PullRequestMetadata(BaseModel):
    """Pull request draft synthesized from a diff."""
    title: str
    body: str
    branch_name: str
    commit_message: str


class MetadataSummarizer(ABC):
    """Abstract base class for commit/PR metadata synthesis.

    Implementations call a language model. Failures propagate to the caller
    unchanged; there is no local retry or fallback text.
    """

    @abstractmethod
    def generate_commit_message(
        self,
        diff: str,
        model_config: ModelConfig,
        prompt: str,
    ) -> CommitMessage:
        """
        Summarize a diff into a commit message.

        Args:
            diff: Patch content selected by the diff precedence rules.
            model_config: Model settings of the agent that produced the diff.
            prompt: Last prompt given to the agent ("" if none).
        """
        pass

    @abstractmethod
    def generate_pr_metadata(
        self,
        diff: str,
        model_config: ModelConfig,
        prompt: str,
    ) -> PullRequestMetadata:
        """Summarize a diff into PR title, body, branch name and commit message."""
        pass
