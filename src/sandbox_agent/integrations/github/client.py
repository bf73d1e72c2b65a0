"""GitHub client for PR management."""

import logging
from typing import Optional

from github import Auth, Github, GithubException, UnknownObjectException
from github.PullRequest import PullRequest
from github.Repository import Repository

from ...core.models import LabelOptions, MergePullRequestResult, PullRequestResult
from ...errors import ExternalAPIError
from ...utils.validators import validate_owner_repo

logger = logging.getLogger(__name__)

MERGE_METHODS = ("merge", "squash", "rebase")


def _error_detail(e: GithubException) -> str:
    data = e.data
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return str(data) if data else str(e)


def to_api_error(e: GithubException, action: str) -> ExternalAPIError:
    """Map a PyGithub failure to our error taxonomy by HTTP status."""
    detail = _error_detail(e)
    status = e.status
    if status == 404:
        message = f"Failed to {action}: not found ({detail})"
    elif status == 405:
        message = f"Failed to {action}: pull request is not mergeable ({detail})"
    elif status == 422:
        message = f"Failed to {action}: validation failed ({detail})"
    else:
        message = f"Failed to {action}: GitHub API error {status} ({detail})"
    return ExternalAPIError(message, status=status)


class GitHubClient:
    """GitHub API client for PR operations."""

    def __init__(self, token: str, repository: str):
        self.repository = validate_owner_repo(repository)
        self.gh = Github(auth=Auth.Token(token))
        try:
            self.repo: Repository = self.gh.get_repo(self.repository)
        except GithubException as e:
            raise to_api_error(e, f"access repository {self.repository}") from e

    def create_pull_request(
        self,
        title: str,
        body: str,
        head_branch: str,
        base_branch: str = "main",
    ) -> PullRequest:
        """Create a pull request."""
        try:
            return self.repo.create_pull(
                title=title,
                body=body,
                head=head_branch,
                base=base_branch,
            )
        except GithubException as e:
            raise to_api_error(e, "create pull request") from e

    def ensure_label(self, label: LabelOptions) -> None:
        """Create the label unless it already exists.

        Only a 404 on lookup triggers creation. Any other lookup failure is
        logged and the label is assumed to exist.
        """
        try:
            self.repo.get_label(label.name)
            return
        except UnknownObjectException:
            logger.info(f"Label '{label.name}' not found, creating it")
        except GithubException as e:
            logger.warning(f"Could not look up label '{label.name}': {_error_detail(e)}")
            return

        try:
            self.repo.create_label(
                name=label.name,
                color=label.color,
                description=label.description,
            )
        except GithubException as e:
            raise to_api_error(e, f"create label {label.name}") from e

    def add_label(self, pr: PullRequest, label_name: str) -> None:
        try:
            pr.add_to_labels(label_name)
        except GithubException as e:
            raise to_api_error(e, f"add label {label_name} to #{pr.number}") from e

    def merge_pull_request(
        self,
        pull_number: int,
        commit_title: Optional[str] = None,
        commit_message: Optional[str] = None,
        merge_method: str = "merge",
    ) -> MergePullRequestResult:
        """Merge a pull request by number."""
        if not isinstance(pull_number, int) or pull_number <= 0:
            raise ValueError(f"pull_number must be a positive integer, got {pull_number!r}")
        if merge_method not in MERGE_METHODS:
            raise ValueError(
                f"merge_method must be one of {', '.join(MERGE_METHODS)}, got '{merge_method}'"
            )

        # Only send what the caller provided
        kwargs = {"merge_method": merge_method}
        if commit_title is not None:
            kwargs["commit_title"] = commit_title
        if commit_message is not None:
            kwargs["commit_message"] = commit_message

        try:
            pr = self.repo.get_pull(pull_number)
            status = pr.merge(**kwargs)
        except GithubException as e:
            raise to_api_error(e, f"merge pull request #{pull_number}") from e

        return MergePullRequestResult(
            sha=status.sha,
            merged=bool(status.merged),
            message=status.message or "",
        )

    @staticmethod
    def to_result(
        pr: PullRequest,
        branch_name: str,
        commit_sha: Optional[str] = None,
    ) -> PullRequestResult:
        """Normalize a PyGithub pull request."""
        return PullRequestResult(
            id=pr.id,
            number=pr.number,
            state=pr.state,
            title=pr.title,
            body=pr.body,
            html_url=pr.html_url,
            head_ref=pr.head.ref,
            head_sha=pr.head.sha,
            base_ref=pr.base.ref,
            user_login=pr.user.login if pr.user else None,
            created_at=pr.created_at,
            updated_at=pr.updated_at,
            merged=bool(pr.merged),
            mergeable=pr.mergeable,
            merge_commit_sha=pr.merge_commit_sha,
            branch_name=branch_name,
            commit_sha=commit_sha,
        )
