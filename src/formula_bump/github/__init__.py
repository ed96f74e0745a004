"""GitHub API integration."""

from .client import GitHubClient
from .duplicates import DuplicateProposalGuard
from .forks import ForkManager
from .models import ForkInfo, PullRequestRef

__all__ = [
    "GitHubClient",
    "DuplicateProposalGuard",
    "ForkManager",
    "ForkInfo",
    "PullRequestRef",
]
