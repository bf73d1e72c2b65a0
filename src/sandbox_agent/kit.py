"""Fluent builder facade over SandboxAgent."""

from pathlib import Path
from typing import Callable, Dict, List, Optional

from .core.agent import SandboxAgent
from .core.config import (
    DEFAULT_WORKING_DIRECTORY,
    AgentMode,
    AgentType,
    GitHubConfig,
    ModelConfig,
    SandboxAgentConfig,
    WorktreeConfig,
)
from .core.models import (
    AgentResponse,
    ExecuteCommandOptions,
    LabelOptions,
    MergePullRequestResult,
    PullRequestResult,
    StreamCallbacks,
)
from .errors import ConfigurationError
from .llm.base import MetadataSummarizer
from .sandbox.protocol import SandboxProvider
from .utils.rich_logging import setup_rich_logging


EVENTS = ("update", "error")


class AgentKit:
    """
    Configure once, then drive the agent.

    Usage:
        kit = (
            AgentKit()
            .with_agent("claude", ModelConfig(api_key=key))
            .with_sandbox(provider)
            .with_github(token=token, repository="octocat/hello-world")
            .with_summarizer(summarizer)
        )
        kit.on("update", print)
        kit.generate_code("Add a README", branch="docs/readme")
        kit.create_pull_request()

    The agent is built on first use. Changing configuration afterwards
    rebuilds it; a live sandbox is carried over through its session id.
    """

    def __init__(self):
        self._agent_type: AgentType = "claude"
        self._model = ModelConfig()
        self._sandbox: Optional[SandboxProvider] = None
        self._working_directory = DEFAULT_WORKING_DIRECTORY
        self._secrets: Dict[str, str] = {}
        self._session_id: Optional[str] = None
        self._worktrees = WorktreeConfig()
        self._github = GitHubConfig()
        self._summarizer: Optional[MetadataSummarizer] = None
        self._logger = None
        self._listeners: Dict[str, List[Callable]] = {event: [] for event in EVENTS}
        self._agent: Optional[SandboxAgent] = None

    @classmethod
    def from_config(
        cls,
        config: SandboxAgentConfig,
        sandbox: Optional[SandboxProvider] = None,
        summarizer: Optional[MetadataSummarizer] = None,
    ) -> "AgentKit":
        kit = (
            cls()
            .with_agent(config.agent_type, config.model)
            .with_working_directory(config.working_directory)
            .with_secrets(config.secrets)
        )
        kit._worktrees = config.worktrees
        kit._github = config.github
        if config.session_id:
            kit.with_session(config.session_id)
        if sandbox is not None:
            kit.with_sandbox(sandbox)
        if summarizer is not None:
            kit.with_summarizer(summarizer)
        return kit

    # -- Builder --

    def _reconfigure(self) -> None:
        if self._agent is not None:
            session_id = self._agent.get_session()
            if session_id:
                self._session_id = session_id
            self._agent = None

    def with_agent(self, agent_type: AgentType, model: Optional[ModelConfig] = None) -> "AgentKit":
        self._agent_type = agent_type
        self._model = model or ModelConfig()
        self._reconfigure()
        return self

    def with_sandbox(self, provider: SandboxProvider) -> "AgentKit":
        self._sandbox = provider
        self._reconfigure()
        return self

    def with_working_directory(self, path: str) -> "AgentKit":
        if not path.startswith("/"):
            raise ConfigurationError(f"Working directory must be an absolute path, got '{path}'")
        self._working_directory = path
        if self._agent is not None:
            self._agent.working_directory = path
        return self

    def with_secrets(self, secrets: Dict[str, str]) -> "AgentKit":
        self._secrets = dict(secrets)
        self._reconfigure()
        return self

    def with_session(self, session_id: str) -> "AgentKit":
        self._session_id = session_id
        self._reconfigure()
        return self

    def with_worktrees(self, root: Optional[str] = None, cleanup: Optional[bool] = None) -> "AgentKit":
        self._worktrees = WorktreeConfig(enabled=True, root=root, cleanup=cleanup)
        self._reconfigure()
        return self

    def with_github(self, token: Optional[str] = None, repository: Optional[str] = None) -> "AgentKit":
        self._github = GitHubConfig(token=token, repository=repository)
        self._reconfigure()
        return self

    def with_summarizer(self, summarizer: MetadataSummarizer) -> "AgentKit":
        self._summarizer = summarizer
        self._reconfigure()
        return self

    def with_logging(
        self,
        log_level: str = "INFO",
        log_dir: Optional[Path] = None,
        use_file: bool = False,
        use_json: bool = False,
    ) -> "AgentKit":
        self._logger = setup_rich_logging(
            self._agent_type,
            log_dir=log_dir,
            log_level=log_level,
            use_file=use_file,
            use_json=use_json,
        )
        self._reconfigure()
        return self

    # -- Listeners --

    def on(self, event: str, listener: Callable) -> "AgentKit":
        """Register a listener for ``update`` (messages and output) or ``error``."""
        if event not in self._listeners:
            raise ValueError(f"Unknown event '{event}'. Expected one of: {', '.join(EVENTS)}")
        self._listeners[event].append(listener)
        return self

    def _emit(self, event: str, payload) -> None:
        for listener in self._listeners[event]:
            listener(payload)

    def _callbacks(self) -> StreamCallbacks:
        return StreamCallbacks(
            on_update=lambda item: self._emit("update", item),
            on_error=lambda message: self._emit("error", message),
        )

    # -- Agent --

    @property
    def agent(self) -> SandboxAgent:
        if self._agent is None:
            self._agent = SandboxAgent(
                sandbox_provider=self._sandbox,
                agent_type=self._agent_type,
                model=self._model,
                working_directory=self._working_directory,
                secrets=self._secrets,
                session_id=self._session_id,
                worktrees=self._worktrees,
                github=self._github,
                summarizer=self._summarizer,
                logger_instance=self._logger,
            )
        return self._agent

    def generate_code(
        self,
        prompt: str,
        mode: AgentMode = "code",
        branch: Optional[str] = None,
        background: bool = False,
    ) -> AgentResponse:
        return self.agent.generate_code(
            prompt,
            mode=mode,
            branch=branch,
            callbacks=self._callbacks(),
            background=background,
        )

    def run_tests(self, branch: Optional[str] = None, background: bool = False) -> AgentResponse:
        return self.agent.run_tests(branch=branch, callbacks=self._callbacks(), background=background)

    def execute_command(
        self,
        command: str,
        options: Optional[ExecuteCommandOptions] = None,
    ) -> AgentResponse:
        options = options or ExecuteCommandOptions()
        if options.callbacks is None:
            options.callbacks = self._callbacks()
        return self.agent.execute_command(command, options)

    def push_to_branch(self, branch: Optional[str] = None) -> None:
        self.agent.push_to_branch(branch)

    def create_pull_request(
        self,
        repository: Optional[str] = None,
        label_options: Optional[LabelOptions] = None,
        branch_prefix: Optional[str] = None,
    ) -> PullRequestResult:
        return self.agent.create_pull_request(
            repository=repository,
            label_options=label_options,
            branch_prefix=branch_prefix,
        )

    def merge_pull_request(
        self,
        pull_number: int,
        repository: Optional[str] = None,
        commit_title: Optional[str] = None,
        commit_message: Optional[str] = None,
        merge_method: str = "merge",
    ) -> MergePullRequestResult:
        return self.agent.merge_pull_request(
            repository,
            pull_number,
            commit_title=commit_title,
            commit_message=commit_message,
            merge_method=merge_method,
        )

    def clone_repository(self, repository: Optional[str] = None, directory: Optional[str] = None) -> None:
        self.agent.clone_repository(repository, directory, callbacks=self._callbacks())

    def get_current_branch(self) -> Optional[str]:
        return self.agent.get_current_branch()

    # -- Session --

    def kill(self) -> None:
        if self._agent is not None:
            self._agent.kill()
        self._session_id = None

    def pause(self) -> None:
        self.agent.pause()

    def resume(self) -> None:
        self.agent.resume()

    def get_session(self) -> Optional[str]:
        if self._agent is None:
            return self._session_id
        return self._agent.get_session()

    def set_session(self, session_id: str) -> None:
        self._session_id = session_id
        if self._agent is not None:
            self._agent.set_session(session_id)

    def get_host(self, port: int) -> str:
        return self.agent.get_host(port)
