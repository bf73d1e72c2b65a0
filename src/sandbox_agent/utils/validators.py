"""Validation utilities for repository names and branch names."""

import re

_UNSAFE_PATH_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def sanitize_branch_name(branch_name: str) -> str:
    """
    Turn a git branch name into a single filesystem path segment.

    Every character outside ``[a-zA-Z0-9._-]`` becomes ``-``, so
    ``feature/login`` maps to ``feature-login``.

    Args:
        branch_name: Branch name to sanitize

    Returns:
        Sanitized path segment

    Raises:
        ValueError: If branch name is empty
    """
    if not branch_name:
        raise ValueError("Branch name cannot be empty")

    return _UNSAFE_PATH_CHARS.sub("-", branch_name)


def validate_owner_repo(owner_repo: str) -> str:
    """
    Validate repository name format (owner/repo).

    Args:
        owner_repo: Repository name in owner/repo format

    Returns:
        Validated repository name

    Raises:
        ValueError: If repository name format is invalid
    """
    if not owner_repo:
        raise ValueError("Repository name cannot be empty")

    # Must be in format "owner/repo"
    if not re.match(r'^[a-zA-Z0-9_.-]+/[a-zA-Z0-9_.-]+$', owner_repo):
        raise ValueError(
            f"Invalid repository format: {owner_repo}. Must be 'owner/repo'"
        )

    # Prevent path traversal
    if '..' in owner_repo or owner_repo.startswith('/'):
        raise ValueError(f"Invalid repository name: {owner_repo}")

    return owner_repo
