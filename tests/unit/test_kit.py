"""Tests for the AgentKit builder facade."""

import pytest

from sandbox_agent import AgentKit
from sandbox_agent.core.config import GitHubConfig, ModelConfig, SandboxAgentConfig, WorktreeConfig
from sandbox_agent.errors import ConfigurationError


@pytest.fixture
def kit(provider, summarizer):
    return (
        AgentKit()
        .with_agent("claude", ModelConfig(api_key="sk-test"))
        .with_sandbox(provider)
        .with_summarizer(summarizer)
    )


class TestBuilder:
    """Tests for builder configuration."""

    def test_agent_built_lazily(self, kit, provider):
        assert kit._agent is None

        agent = kit.agent

        assert kit.agent is agent
        assert agent.agent_type == "claude"
        assert provider.create_calls == []

    def test_with_worktrees(self, kit):
        kit.with_worktrees(root="/trees", cleanup=False)

        config = kit.agent.git.worktree_config
        assert config.enabled is True
        assert config.root == "/trees"
        assert config.cleanup_enabled is False

    def test_github_token_from_secrets(self, kit):
        kit.with_secrets({"GH_TOKEN": "ghp_secret"}).with_github(repository="octocat/hello-world")

        assert kit.agent.github_token == "ghp_secret"

    def test_relative_working_directory_rejected(self, kit):
        with pytest.raises(ConfigurationError):
            kit.with_working_directory("relative/path")

    def test_working_directory_applies_to_live_agent(self, kit, sandbox):
        kit.execute_command("true")

        kit.with_working_directory("/repo").execute_command("ls")

        assert sandbox.commands.commands[-1] == "cd /repo && ls"

    def test_reconfigure_keeps_sandbox(self, kit, provider):
        kit.execute_command("true")

        kit.with_secrets({"NEW": "1"}).execute_command("true")

        assert len(provider.create_calls) == 1
        assert provider.resume_calls == ["sbx-123"]

    def test_from_config(self, provider, summarizer):
        config = SandboxAgentConfig(
            agent_type="codex",
            working_directory="/workspace",
            worktrees=WorktreeConfig(enabled=True),
            github=GitHubConfig(token="ghp", repository="octocat/hello-world"),
        )

        kit = AgentKit.from_config(config, sandbox=provider, summarizer=summarizer)

        assert kit.agent.agent_type == "codex"
        assert kit.agent.working_directory == "/workspace"
        assert kit.agent.git.worktree_config.enabled is True
        assert kit.agent.github_token == "ghp"


class TestListeners:
    """Tests for update/error listeners."""

    def test_updates_delivered(self, kit, sandbox):
        updates = []
        kit.on("update", updates.append)
        sandbox.commands.when("claude -p", stdout='{"type":"result"}\n')

        kit.generate_code("Add tests")

        assert [u["type"] for u in updates] == ["start", "result", "end"]

    def test_errors_delivered(self, kit, sandbox):
        errors = []
        kit.on("error", errors.append)
        sandbox.commands.when("boom", raises=RuntimeError("lost connection"))

        with pytest.raises(Exception):
            kit.execute_command("boom")

        assert errors == ["Failed to execute command: lost connection"]

    def test_unknown_event(self, kit):
        with pytest.raises(ValueError, match="Unknown event"):
            kit.on("stdout", print)


class TestSession:
    """Tests for session passthrough."""

    def test_session_round_trip(self, kit, provider):
        kit.set_session("sbx-saved")
        assert kit.get_session() == "sbx-saved"

        kit.execute_command("true")

        assert provider.resume_calls == ["sbx-saved"]

    def test_kill(self, kit, sandbox):
        kit.execute_command("true")

        kit.kill()

        assert sandbox.killed is True
        assert kit.get_session() is None

    def test_get_host(self, kit):
        assert kit.get_host(3000) == "3000-sbx-123.sandbox.test"
