"""GitHub pull request integration."""

from .client import GitHubClient, to_api_error

__all__ = ["GitHubClient", "to_api_error"]
