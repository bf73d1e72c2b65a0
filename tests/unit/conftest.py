"""Shared test fixtures: an in-memory sandbox provider that records commands."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional
from unittest.mock import MagicMock, patch

import pytest

from sandbox_agent.core.agent import SandboxAgent
from sandbox_agent.core.config import GitHubConfig, ModelConfig, WorktreeConfig
from sandbox_agent.core.models import StreamCallbacks
from sandbox_agent.llm.base import CommitMessage, MetadataSummarizer, PullRequestMetadata
from sandbox_agent.sandbox.protocol import CommandResult


@dataclass
class CommandRule:
    fragment: str
    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""
    stdout_chunks: Optional[List[str]] = None
    stderr_chunks: Optional[List[str]] = None
    raises: Optional[Exception] = None
    on_run: Optional[Callable[[], None]] = None


@dataclass
class RecordedCall:
    command: str
    timeout_ms: Optional[int]
    background: bool


class FakeCommands:
    """Records every command; replies from the most recently added matching rule."""

    def __init__(self):
        self.calls: List[RecordedCall] = []
        self._rules: List[CommandRule] = []

    def when(self, fragment: str, **kwargs) -> CommandRule:
        rule = CommandRule(fragment=fragment, **kwargs)
        self._rules.append(rule)
        return rule

    @property
    def commands(self) -> List[str]:
        return [c.command for c in self.calls]

    def find(self, fragment: str) -> List[RecordedCall]:
        return [c for c in self.calls if fragment in c.command]

    def run(
        self,
        command: str,
        *,
        timeout_ms: Optional[int] = None,
        background: bool = False,
        on_stdout: Optional[Callable[[str], None]] = None,
        on_stderr: Optional[Callable[[str], None]] = None,
    ) -> CommandResult:
        self.calls.append(RecordedCall(command, timeout_ms, background))

        rule = next((r for r in reversed(self._rules) if r.fragment in command), None)
        if rule is None:
            return CommandResult(exit_code=0)
        if rule.on_run is not None:
            rule.on_run()
        if rule.raises is not None:
            raise rule.raises

        stdout, stderr = rule.stdout, rule.stderr
        if rule.stdout_chunks is not None:
            stdout = "".join(rule.stdout_chunks)
            for chunk in rule.stdout_chunks:
                if on_stdout:
                    on_stdout(chunk)
        elif stdout and on_stdout:
            on_stdout(stdout)
        if rule.stderr_chunks is not None:
            stderr = "".join(rule.stderr_chunks)
            for chunk in rule.stderr_chunks:
                if on_stderr:
                    on_stderr(chunk)
        elif stderr and on_stderr:
            on_stderr(stderr)

        return CommandResult(exit_code=rule.exit_code, stdout=stdout, stderr=stderr)


class FakeSandbox:
    def __init__(self, sandbox_id: str = "sbx-123"):
        self.sandbox_id = sandbox_id
        self.commands = FakeCommands()
        self.killed = False
        self.paused = False

    def kill(self) -> None:
        self.killed = True

    def pause(self) -> None:
        self.paused = True

    def get_host(self, port: int) -> str:
        return f"{port}-{self.sandbox_id}.sandbox.test"


@dataclass
class FakeProvider:
    sandbox: FakeSandbox = field(default_factory=FakeSandbox)
    create_calls: list = field(default_factory=list)
    resume_calls: list = field(default_factory=list)

    def create(self, env_vars=None, agent_type=None, working_directory=None) -> FakeSandbox:
        self.create_calls.append({
            "env_vars": env_vars,
            "agent_type": agent_type,
            "working_directory": working_directory,
        })
        return self.sandbox

    def resume(self, sandbox_id: str) -> FakeSandbox:
        self.resume_calls.append(sandbox_id)
        self.sandbox.sandbox_id = sandbox_id
        return self.sandbox


@pytest.fixture
def provider():
    """Fake sandbox provider."""
    return FakeProvider()


@pytest.fixture
def sandbox(provider):
    """The sandbox the fake provider hands out."""
    return provider.sandbox


@pytest.fixture
def summarizer():
    """Mock summarizer with canned commit message and PR metadata."""
    mock = MagicMock(spec=MetadataSummarizer)
    mock.generate_commit_message.return_value = CommitMessage(commit_message="Add feature")
    mock.generate_pr_metadata.return_value = PullRequestMetadata(
        title="Add login page",
        body="Adds a login page.",
        branch_name="add-login-page",
        commit_message="Add login page",
    )
    return mock


@pytest.fixture
def make_agent(provider, summarizer):
    """Factory for agents wired to the fake provider."""
    def _make(**kwargs) -> SandboxAgent:
        kwargs.setdefault("sandbox_provider", provider)
        kwargs.setdefault("summarizer", summarizer)
        kwargs.setdefault("model", ModelConfig(api_key="sk-test"))
        kwargs.setdefault("github", GitHubConfig())
        kwargs.setdefault("worktrees", WorktreeConfig())
        return SandboxAgent(**kwargs)
    return _make


class Recorder:
    """Collects items delivered to on_update / on_error."""

    def __init__(self):
        self.updates = []
        self.errors = []

    def on_update(self, item):
        self.updates.append(item)

    def on_error(self, message):
        self.errors.append(message)

    def callbacks(self) -> StreamCallbacks:
        return StreamCallbacks(on_update=self.on_update, on_error=self.on_error)

    def of_type(self, message_type: str):
        return [u for u in self.updates if isinstance(u, dict) and u.get("type") == message_type]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def pull_request():
    """PyGithub-shaped pull request."""
    created = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    pr = MagicMock()
    pr.id = 1001
    pr.number = 42
    pr.state = "open"
    pr.title = "Add login page"
    pr.body = "Adds a login page."
    pr.html_url = "https://github.com/octocat/hello-world/pull/42"
    pr.head.ref = "add-login-page"
    pr.head.sha = "1a2b3c4d5e6f"
    pr.base.ref = "main"
    pr.user.login = "octocat"
    pr.created_at = created
    pr.updated_at = created
    pr.merged = False
    pr.mergeable = None
    pr.merge_commit_sha = None
    return pr


@pytest.fixture
def github_cls(pull_request):
    """Patch the PyGithub entry point."""
    with patch("sandbox_agent.integrations.github.client.Github") as github_cls:
        github_cls.return_value.get_repo.return_value.create_pull.return_value = pull_request
        yield github_cls


@pytest.fixture
def mock_github(github_cls):
    """The mocked PyGithub repository."""
    return github_cls.return_value.get_repo.return_value
