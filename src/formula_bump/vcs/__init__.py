"""Version-control layer."""

from .git import Git, parse_github_repository

__all__ = ["Git", "parse_github_repository"]
