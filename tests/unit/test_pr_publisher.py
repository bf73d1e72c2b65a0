"""Tests for the pull request publishing flow."""

from unittest.mock import MagicMock

import pytest
from github import GithubException, UnknownObjectException

from sandbox_agent.core.config import GitHubConfig
from sandbox_agent.core.models import LabelOptions
from sandbox_agent.core.pr_publisher import extract_commit_sha
from sandbox_agent.errors import ConfigurationError, ExternalAPIError, NoChangesError

GITHUB = GitHubConfig(token="ghp_test", repository="octocat/hello-world")


@pytest.fixture
def agent(make_agent, github_cls):
    return make_agent(github=GITHUB)


@pytest.fixture
def changed(sandbox):
    """Working tree with one modified file on main."""
    sandbox.commands.when("git rev-parse --abbrev-ref HEAD", stdout="main\n")
    sandbox.commands.when("git status --porcelain", stdout=" M app.py\n")
    sandbox.commands.when("--diff-filter=ACMR", stdout="diff --git a/app.py b/app.py")
    sandbox.commands.when("git commit", stdout="[add-login-page 1a2b3c4] Add login page\n 1 file changed\n")
    return sandbox


class TestPreconditions:
    """Configuration and no-change failures."""

    def test_requires_token(self, make_agent, github_cls):
        agent = make_agent(github=GitHubConfig(repository="octocat/hello-world"))

        with pytest.raises(ConfigurationError, match="token"):
            agent.create_pull_request()

        github_cls.assert_not_called()

    def test_requires_repository(self, make_agent, sandbox):
        agent = make_agent(github=GitHubConfig(token="ghp_test"))

        with pytest.raises(ConfigurationError, match="repository"):
            agent.create_pull_request()

        assert sandbox.commands.calls == []

    def test_invalid_repository(self, agent):
        with pytest.raises(ConfigurationError, match="owner/repo"):
            agent.create_pull_request(repository="not-a-repo")

    def test_no_changes_found_before_github_call(self, agent, sandbox, github_cls, summarizer):
        with pytest.raises(NoChangesError, match="No changes found - check if the agent actually modified any files"):
            agent.create_pull_request()

        github_cls.assert_not_called()
        summarizer.generate_pr_metadata.assert_not_called()
        assert sandbox.commands.find("git commit") == []
        assert sandbox.commands.find("git push") == []


class TestCreatePullRequest:
    """Happy-path publishing."""

    def test_commits_pushes_and_opens_pr(self, agent, changed, mock_github, summarizer):
        result = agent.create_pull_request()

        commands = changed.commands.commands
        assert commands[0] == "cd /vibe0 && git rev-parse --abbrev-ref HEAD"
        assert 'cd /vibe0 && git checkout -b add-login-page && git add -A && git commit -m "Add login page"' in commands
        assert commands[-1] == "cd /vibe0 && git push --set-upstream origin add-login-page"

        diff, model_config, prompt = summarizer.generate_pr_metadata.call_args.args
        assert diff == "diff --git a/app.py b/app.py"
        assert model_config.provider == "anthropic"
        assert prompt == ""

        mock_github.create_pull.assert_called_once_with(
            title="Add login page",
            body="Adds a login page.",
            head="add-login-page",
            base="main",
        )
        assert result.number == 42
        assert result.branch_name == "add-login-page"
        assert result.commit_sha == "1a2b3c4"

    def test_branch_prefix(self, agent, changed, mock_github):
        result = agent.create_pull_request(branch_prefix="agent")

        assert result.branch_name == "agent/add-login-page"
        assert changed.commands.find("git checkout -b agent/add-login-page")
        assert mock_github.create_pull.call_args.kwargs["head"] == "agent/add-login-page"

    def test_base_branch_captured_first(self, agent, changed, mock_github):
        changed.commands.when("git rev-parse --abbrev-ref HEAD", stdout="develop\n")

        agent.create_pull_request()

        assert mock_github.create_pull.call_args.kwargs["base"] == "develop"

    def test_detached_head_targets_main(self, agent, changed, mock_github):
        changed.commands.when("git rev-parse --abbrev-ref HEAD", stdout="HEAD\n")

        agent.create_pull_request()

        assert mock_github.create_pull.call_args.kwargs["base"] == "main"

    def test_untracked_files_are_staged(self, agent, sandbox, mock_github):
        sandbox.commands.when("git ls-files --others", stdout="login.html\n")
        sandbox.commands.when("--cached", stdout="diff --git a/login.html b/login.html")

        agent.create_pull_request()

        assert "cd /vibe0 && git add ." in sandbox.commands.commands
        mock_github.create_pull.assert_called_once()

    def test_status_failure_is_not_fatal(self, agent, changed, mock_github):
        changed.commands.when("git status --porcelain", exit_code=128, stderr="fatal")

        agent.create_pull_request()

        mock_github.create_pull.assert_called_once()

    def test_commit_message_quotes_escaped(self, agent, changed, summarizer):
        summarizer.generate_pr_metadata.return_value.commit_message = 'Add "login" page'

        agent.create_pull_request()

        assert changed.commands.find('git commit -m "Add \\"login\\" page"')

    def test_token_from_secrets(self, make_agent, changed, mock_github):
        agent = make_agent(
            github=GitHubConfig(repository="octocat/hello-world"),
            secrets={"GH_TOKEN": "ghp_from_secrets"},
        )

        agent.create_pull_request()

        mock_github.create_pull.assert_called_once()

    def test_github_error_propagates(self, agent, changed, mock_github):
        mock_github.create_pull.side_effect = GithubException(422, {"message": "No commits between"}, None)

        with pytest.raises(ExternalAPIError) as exc_info:
            agent.create_pull_request()

        assert exc_info.value.status == 422


class TestLabels:
    """Label ensure-and-attach."""

    def test_unknown_label_created_then_attached(self, agent, changed, mock_github, pull_request):
        mock_github.get_label.side_effect = UnknownObjectException(404, {"message": "Not Found"}, None)

        agent.create_pull_request()

        mock_github.create_label.assert_called_once_with(
            name="claude",
            color="FF6B35",
            description="Generated by Claude AI agent",
        )
        pull_request.add_to_labels.assert_called_once_with("claude")

    def test_existing_label_only_attached(self, agent, changed, mock_github, pull_request):
        agent.create_pull_request()

        mock_github.create_label.assert_not_called()
        pull_request.add_to_labels.assert_called_once_with("claude")

    def test_custom_label(self, agent, changed, pull_request):
        agent.create_pull_request(label_options=LabelOptions(name="bot", color="000000"))

        pull_request.add_to_labels.assert_called_once_with("bot")

    def test_label_failure_swallowed(self, agent, changed, pull_request):
        pull_request.add_to_labels.side_effect = GithubException(403, {"message": "Forbidden"}, None)

        result = agent.create_pull_request()

        assert result.number == 42


class TestMergePullRequest:
    """Merging through the agent."""

    def test_merge(self, agent, mock_github):
        status = MagicMock(sha="abc123", merged=True, message="Pull Request successfully merged")
        mock_github.get_pull.return_value.merge.return_value = status

        result = agent.merge_pull_request("octocat/hello-world", 7, merge_method="squash")

        mock_github.get_pull.assert_called_once_with(7)
        assert result.merged is True
        assert result.sha == "abc123"

    def test_merge_requires_token(self, make_agent):
        agent = make_agent()

        with pytest.raises(ConfigurationError):
            agent.merge_pull_request("octocat/hello-world", 7)


@pytest.mark.parametrize("output,expected", [
    ("[add-login-page 1a2b3c4] Add login page", "1a2b3c4"),
    ("[feature/x-y 0123abcd] msg", "0123abcd"),
    ("[main (root-commit) deadbee] Initial", "deadbee"),
    ("nothing to commit, working tree clean", None),
    ("", None),
])
def test_extract_commit_sha(output, expected):
    assert extract_commit_sha(output) == expected
