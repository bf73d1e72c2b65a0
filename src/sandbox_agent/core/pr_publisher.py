"""Pull request publishing: diff selection, metadata, commit, push, PR, label."""

import logging
import re
from typing import Callable, Optional

from ..errors import ConfigurationError, NoChangesError
from ..integrations.github.client import GitHubClient
from ..utils.error_handling import ErrorContext
from ..utils.validators import validate_owner_repo
from .git_operations import GitWorkflowController
from .models import LabelOptions, MergePullRequestResult, PullRequestResult

logger = logging.getLogger(__name__)

# "[feature/x abc1234] msg" and "[main (root-commit) abc1234] msg"
_COMMIT_SHA_PATTERN = re.compile(r"\[[^\]\n]*?\b([0-9a-f]{7,40})\]")


def extract_commit_sha(commit_output: str) -> Optional[str]:
    """Pull the short SHA out of ``git commit`` output, if present."""
    match = _COMMIT_SHA_PATTERN.search(commit_output or "")
    return match.group(1) if match else None


class PullRequestPublisher:
    """Turns the agent's working-tree changes into a labeled GitHub pull request."""

    def __init__(
        self,
        git: GitWorkflowController,
        token: Optional[str] = None,
        repository: Optional[str] = None,
        client_factory: Callable[[str, str], GitHubClient] = GitHubClient,
        logger_instance=None,
    ):
        self.git = git
        self.token = token
        self.repository = repository
        self._client_factory = client_factory
        self.logger = logger_instance or logger

    def _resolve_target(self, repository: Optional[str]) -> tuple:
        if not self.token:
            raise ConfigurationError(
                "GitHub token is required to create a pull request. Use with_github() to configure one."
            )
        repo = repository or self.repository
        if not repo:
            raise ConfigurationError(
                "GitHub repository is required (owner/repo). Pass it explicitly or configure it with with_github()."
            )
        try:
            return self.token, validate_owner_repo(repo)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def create_pull_request(
        self,
        repository: Optional[str] = None,
        label_options: Optional[LabelOptions] = None,
        branch_prefix: Optional[str] = None,
        prompt: str = "",
        default_label: Optional[LabelOptions] = None,
    ) -> PullRequestResult:
        """
        Commit the current changes on a new branch, push it and open a PR.

        Args:
            repository: ``owner/repo`` (defaults to the configured repository)
            label_options: Label to attach instead of the agent's default label
            branch_prefix: Prepended to the generated branch name as ``prefix/name``
            prompt: Last prompt given to the agent, passed to the summarizer
            default_label: Agent variant's label, used when no label_options given

        Raises:
            ConfigurationError: Missing token, repository or summarizer
            NoChangesError: No diff could be produced; nothing is sent to GitHub
        """
        token, repo = self._resolve_target(repository)
        summarizer = self.git.require_summarizer()
        directory, _ = self.git.active_directory_for(self.git.current_branch)

        base_branch = self.git.current_branch_name(directory)
        if base_branch == "HEAD":
            base_branch = ""

        untracked = ""
        with ErrorContext(
            "checking repository status",
            raise_on_error=False,
            logger_instance=self.logger,
            log_level=logging.DEBUG,
        ):
            status, untracked = self.git.list_changes(directory)
            self.logger.debug(f"git status:\n{status}")

        diff = self.git.compute_diff(directory, untracked=untracked, stage_untracked=True)
        if not diff.strip():
            raise NoChangesError("No changes found - check if the agent actually modified any files")

        metadata = summarizer.generate_pr_metadata(diff, self.git.model_config, prompt or "")
        branch_name = metadata.branch_name
        if branch_prefix:
            branch_name = f"{branch_prefix}/{branch_name}"

        commit = self.git.commit_all(metadata.commit_message, cwd=directory, new_branch=branch_name)
        self.git.push(branch_name, cwd=directory)
        commit_sha = extract_commit_sha(commit.stdout)

        client = self._client_factory(token, repo)
        pr = client.create_pull_request(
            title=metadata.title,
            body=metadata.body,
            head_branch=branch_name,
            base_branch=base_branch or "main",
        )
        self.logger.info(f"Created pull request #{pr.number}: {pr.html_url}")

        label = label_options or default_label
        if label:
            # The PR exists at this point; a label problem must not fail the call
            with ErrorContext(
                f"labeling pull request #{pr.number}",
                raise_on_error=False,
                logger_instance=self.logger,
                log_level=logging.WARNING,
            ):
                client.ensure_label(label)
                client.add_label(pr, label.name)

        return GitHubClient.to_result(pr, branch_name=branch_name, commit_sha=commit_sha)

    def merge_pull_request(
        self,
        repository: Optional[str],
        pull_number: int,
        commit_title: Optional[str] = None,
        commit_message: Optional[str] = None,
        merge_method: str = "merge",
    ) -> MergePullRequestResult:
        token, repo = self._resolve_target(repository)
        client = self._client_factory(token, repo)
        result = client.merge_pull_request(
            pull_number,
            commit_title=commit_title,
            commit_message=commit_message,
            merge_method=merge_method,
        )
        self.logger.info(f"Merge of #{pull_number} in {repo}: merged={result.merged}")
        return result
