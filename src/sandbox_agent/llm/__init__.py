"""Metadata summarizer contract."""

from .base import CommitMessage, MetadataSummarizer, PullRequestMetadata

__all__ = ["CommitMessage", "MetadataSummarizer", "PullRequestMetadata"]
