"""Data models for GitHub API payloads."""

from pydantic import BaseModel


class ForkInfo(BaseModel):
    """The fork created for the authenticated user."""

    clone_url: str
    ssh_url: str
    owner: str  # login of the fork owner


class PullRequestRef(BaseModel):
    """An open issue or pull request returned by search."""

    title: str
    html_url: str

    @property
    def is_pull_request(self) -> bool:
        return "/pull/" in self.html_url
