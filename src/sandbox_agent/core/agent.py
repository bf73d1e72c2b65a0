"""Sandbox agent: runs commands and coding agents inside a remote sandbox."""

import json
import logging
import re
import shlex
from typing import Optional

from ..agents import create_agent_variant
from ..errors import ConfigurationError, SandboxAgentError, SandboxTransportError
from ..llm.base import MetadataSummarizer
from ..sandbox.protocol import SandboxProvider
from ..utils.rich_logging import ContextLogger
from ..utils.stream_parser import StreamingJSONExtractor, parse_stream_json_messages
from .config import (
    DEFAULT_WORKING_DIRECTORY,
    AgentMode,
    AgentType,
    GitHubConfig,
    ModelConfig,
    SandboxAgentConfig,
    WorktreeConfig,
)
from .git_operations import GitWorkflowController, git_notification
from .models import (
    DEFAULT_TIMEOUT_MS,
    AgentResponse,
    ExecuteCommandOptions,
    LabelOptions,
    MergePullRequestResult,
    MessageType,
    PullRequestResult,
    StreamCallbacks,
    StreamingMessage,
)
from .pr_publisher import PullRequestPublisher
from .session import SandboxSessionManager

logger = logging.getLogger(__name__)

RUN_TESTS_PROMPT = "Install dependencies and run tests"

_STREAM_JSON_FLAG = re.compile(r"--output-format(?:\s+|=)stream-json\b")


class SandboxAgent:
    """
    One coding agent bound to one sandbox session.

    Owns the session, the branch/worktree state and the last prompt, so that a
    later push or pull request picks up exactly what the agent produced.
    Instances are not thread-safe; use one agent per concurrent task.
    """

    def __init__(
        self,
        sandbox_provider: Optional[SandboxProvider] = None,
        agent_type: AgentType = "claude",
        model: Optional[ModelConfig] = None,
        working_directory: str = DEFAULT_WORKING_DIRECTORY,
        secrets: Optional[dict] = None,
        session_id: Optional[str] = None,
        worktrees: Optional[WorktreeConfig] = None,
        github: Optional[GitHubConfig] = None,
        summarizer: Optional[MetadataSummarizer] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        self.variant = create_agent_variant(agent_type, model or ModelConfig())
        if isinstance(logger_instance, ContextLogger):
            self.logger = logger_instance
        else:
            self.logger = ContextLogger(logger_instance or logger, agent_type)
        self.secrets = dict(secrets or {})
        self.github = github or GitHubConfig()

        self.sessions = SandboxSessionManager(
            provider=sandbox_provider,
            agent_type=agent_type,
            working_directory=working_directory,
            env_vars=self.variant.environment_variables(),
            secrets=self.secrets,
            session_id=session_id,
            logger_instance=self.logger,
        )
        self.git = GitWorkflowController(
            self.sessions,
            worktree_config=worktrees,
            summarizer=summarizer,
            model_config=self.variant.model_config(),
            logger_instance=self.logger,
        )
        self.publisher = PullRequestPublisher(
            self.git,
            token=self.github_token,
            repository=self.github.repository,
            logger_instance=self.logger,
        )

        self.last_prompt: Optional[str] = None

    @classmethod
    def from_config(
        cls,
        config: SandboxAgentConfig,
        sandbox_provider: Optional[SandboxProvider] = None,
        summarizer: Optional[MetadataSummarizer] = None,
    ) -> "SandboxAgent":
        return cls(
            sandbox_provider=sandbox_provider,
            agent_type=config.agent_type,
            model=config.model,
            working_directory=config.working_directory,
            secrets=config.secrets,
            session_id=config.session_id,
            worktrees=config.worktrees,
            github=config.github,
            summarizer=summarizer,
        )

    @property
    def agent_type(self) -> str:
        return self.variant.agent_type

    @property
    def github_token(self) -> Optional[str]:
        return self.github.token or self.secrets.get("GH_TOKEN")

    @property
    def working_directory(self) -> str:
        return self.sessions.working_directory

    @working_directory.setter
    def working_directory(self, path: str) -> None:
        self.sessions.working_directory = path

    def get_current_branch(self) -> Optional[str]:
        """Branch used by the last branch-scoped command or push."""
        return self.git.current_branch

    # -- Command execution --

    def execute_command(
        self,
        command: str,
        options: Optional[ExecuteCommandOptions] = None,
    ) -> AgentResponse:
        """
        Run a shell command in the sandbox, streaming output to the callbacks.

        Args:
            command: Shell command, run from the working directory (or the
                branch's worktree)
            options: Timeout, background flag, branch, callbacks, output format

        Returns:
            AgentResponse with the exit code and full output. A non-zero exit
            code is reported here, not raised.

        Raises:
            SandboxAgentError: Our own failures pass through unchanged
            SandboxTransportError: Any other failure, wrapped
        """
        options = options or ExecuteCommandOptions()
        callbacks = options.callbacks or StreamCallbacks()

        try:
            return self._run(
                command,
                callbacks=callbacks,
                branch=options.branch,
                timeout_ms=options.timeout_ms,
                background=options.background,
                output_format=options.output_format,
                announce_resumed=False,
            )
        except SandboxAgentError as e:
            callbacks.error(str(e))
            raise
        except Exception as e:
            error = SandboxTransportError(f"Failed to execute command: {e}")
            callbacks.error(str(error))
            raise error from e

    def generate_code(
        self,
        prompt: str,
        mode: AgentMode = "code",
        branch: Optional[str] = None,
        callbacks: Optional[StreamCallbacks] = None,
        background: bool = False,
    ) -> AgentResponse:
        """
        Run the coding agent on a prompt.

        When a GitHub token and repository are configured, the repository is
        cloned into the working directory first unless it is already a git
        checkout.
        """
        callbacks = callbacks or StreamCallbacks()
        command_config = self.variant.command_config(prompt, mode)

        try:
            response = self._run(
                command_config.command,
                callbacks=callbacks,
                branch=branch,
                timeout_ms=DEFAULT_TIMEOUT_MS,
                background=background,
                announce_resumed=True,
                clone_repository=True,
            )
        except SandboxAgentError as e:
            callbacks.error(str(e))
            raise
        except Exception as e:
            self.logger.error(f"{command_config.error_prefix} run failed: {e}")
            error = SandboxTransportError(f"Failed to generate code: {e}")
            callbacks.error(str(error))
            raise error from e

        self.last_prompt = prompt
        return response

    def run_tests(
        self,
        branch: Optional[str] = None,
        callbacks: Optional[StreamCallbacks] = None,
        background: bool = False,
    ) -> AgentResponse:
        return self.generate_code(
            RUN_TESTS_PROMPT,
            mode="code",
            branch=branch,
            callbacks=callbacks,
            background=background,
        )

    def _run(
        self,
        command: str,
        *,
        callbacks: StreamCallbacks,
        branch: Optional[str],
        timeout_ms: int,
        background: bool,
        announce_resumed: bool,
        output_format: Optional[str] = None,
        clone_repository: bool = False,
    ) -> AgentResponse:
        sandbox = self.sessions.get_sandbox()
        sandbox_id = sandbox.sandbox_id
        self.logger.set_session_context(sandbox_id=sandbox_id)

        if announce_resumed or not self.sessions.resumed:
            callbacks.update(
                StreamingMessage(type=MessageType.START, sandbox_id=sandbox_id).to_wire()
            )

        self.git.ensure_working_directory()

        # The clone has to land before the branch probe below
        token = self.github_token
        if clone_repository and token and self.github.repository:
            self.git.clone_if_missing(self.github.repository, token)

        directory = self.working_directory
        if branch:
            if self.git.is_git_repository():
                directory = self.git.resolve_branch(branch, callbacks)
            else:
                self.logger.warning(f"{directory} is not a git repository, ignoring branch {branch}")
                callbacks.update(git_notification(
                    f"Not a git repository at {directory}, skipping branch setup for {branch}"
                ))

        stdout_extractor = StreamingJSONExtractor(callbacks.update)
        stderr_extractor = StreamingJSONExtractor(callbacks.update)

        self.logger.debug(f"Running in {directory}: {command}")
        result = sandbox.commands.run(
            f"cd {shlex.quote(directory)} && {command}",
            timeout_ms=timeout_ms,
            background=background,
            on_stdout=stdout_extractor.append,
            on_stderr=stderr_extractor.append,
        )
        stdout_extractor.flush()
        stderr_extractor.flush()

        callbacks.update(StreamingMessage(
            type=MessageType.END,
            sandbox_id=sandbox_id,
            output=json.dumps(result.to_dict()),
        ).to_wire())

        response = AgentResponse(
            sandbox_id=sandbox_id,
            exit_code=result.exit_code,
            stdout=result.stdout,
            stderr=result.stderr,
        )
        if output_format == "stream-json" or _STREAM_JSON_FLAG.search(command):
            response.messages = parse_stream_json_messages(result.stdout)
            response.raw_stdout = result.stdout
        return response

    # -- Git / GitHub --

    def push_to_branch(self, branch: Optional[str] = None) -> None:
        """Commit all changes and push them to ``branch`` (default: last branch used)."""
        self.git.push_to_branch(branch, prompt=self.last_prompt or "")

    def create_pull_request(
        self,
        repository: Optional[str] = None,
        label_options: Optional[LabelOptions] = None,
        branch_prefix: Optional[str] = None,
    ) -> PullRequestResult:
        return self.publisher.create_pull_request(
            repository=repository,
            label_options=label_options,
            branch_prefix=branch_prefix,
            prompt=self.last_prompt or "",
            default_label=self.variant.default_label(),
        )

    def merge_pull_request(
        self,
        repository: Optional[str],
        pull_number: int,
        commit_title: Optional[str] = None,
        commit_message: Optional[str] = None,
        merge_method: str = "merge",
    ) -> MergePullRequestResult:
        return self.publisher.merge_pull_request(
            repository,
            pull_number,
            commit_title=commit_title,
            commit_message=commit_message,
            merge_method=merge_method,
        )

    def clone_repository(
        self,
        repository: Optional[str] = None,
        directory: Optional[str] = None,
        callbacks: Optional[StreamCallbacks] = None,
    ) -> None:
        """Clone ``owner/repo`` (default: the configured repository) into the sandbox."""
        repo = repository or self.github.repository
        if not repo:
            raise ConfigurationError("No repository given and none configured")
        self.git.clone_repository(repo, directory, token=self.github_token, callbacks=callbacks)

    # -- Session --

    def get_sandbox(self):
        return self.sessions.get_sandbox()

    def kill(self) -> None:
        self.sessions.kill_sandbox()
        self.logger.clear_context()

    def pause(self) -> None:
        self.sessions.pause_sandbox()

    def resume(self) -> None:
        self.sessions.resume_sandbox()

    def get_session(self) -> Optional[str]:
        return self.sessions.get_session()

    def set_session(self, session_id: str) -> None:
        self.sessions.set_session(session_id)

    def get_host(self, port: int) -> str:
        return self.sessions.get_host(port)
