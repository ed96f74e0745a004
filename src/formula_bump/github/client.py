"""GitHub REST API client."""

import logging
from typing import Any, Optional

import httpx

from ..config import settings
from ..errors import HostApiError, HostAuthError, RateLimitError
from .models import ForkInfo, PullRequestRef

logger = logging.getLogger(__name__)


class GitHubClient:
    """GitHub HTTP API client."""

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.token = token if token is not None else settings.github_token
        self.base_url = (base_url or settings.github_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.github_timeout_seconds
        self.transport = transport
        self._username: Optional[str] = None

    def _headers(self) -> dict:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "formula-bump",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
        allow_not_found: bool = False,
    ) -> Any:
        """Send a request and return decoded JSON (None for an allowed 404)."""
        with httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
            headers=self._headers(),
        ) as client:
            try:
                response = client.request(method, path, params=params, json=json)
            except httpx.HTTPError as e:
                raise HostApiError(f"GitHub API request failed: {e}") from e

        if allow_not_found and response.status_code == 404:
            return None
        self._raise_for_status(response)
        if not response.content:
            return {}
        return response.json()

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return

        try:
            data = response.json()
            message = data.get("message", "") if isinstance(data, dict) else ""
        except ValueError:
            message = response.text
        message = message or response.reason_phrase

        if response.status_code == 401:
            raise HostAuthError(f"GitHub API authentication failed: {message}")
        rate_limited = response.headers.get("X-RateLimit-Remaining") == "0"
        if response.status_code in (403, 429) and (rate_limited or "rate limit" in message.lower()):
            reset = response.headers.get("X-RateLimit-Reset")
            suffix = f" (resets at {reset})" if reset else ""
            raise RateLimitError(f"GitHub API rate limit exceeded: {message}{suffix}")
        raise HostApiError(f"GitHub API error {response.status_code}: {message}")

    def current_user(self) -> str:
        """Login of the authenticated user."""
        if self._username is None:
            self._username = self._request("GET", "/user")["login"]
        return self._username

    def create_fork(self, repository: str) -> ForkInfo:
        """Fork ``owner/repo`` into the authenticated user's account."""
        data = self._request("POST", f"/repos/{repository}/forks")
        logger.info(f"Requested fork of {repository}")
        return ForkInfo(
            clone_url=data["clone_url"],
            ssh_url=data["ssh_url"],
            owner=data["owner"]["login"],
        )

    def fork_exists(self, repository: str) -> bool:
        """Whether the user's fork of ``owner/repo`` is visible yet."""
        name = repository.split("/", 1)[-1]
        data = self._request(
            "GET", f"/repos/{self.current_user()}/{name}", allow_not_found=True
        )
        return data is not None

    def search_open_pull_requests(self, name: str, repository: str) -> list[PullRequestRef]:
        """Open issues and pull requests in ``repository`` whose title mentions ``name``."""
        query = f"{name} repo:{repository} state:open in:title"
        data = self._request("GET", "/search/issues", params={"q": query})
        return [
            PullRequestRef(title=item["title"], html_url=item["html_url"])
            for item in data.get("items", [])
        ]

    def create_pull_request(
        self, repository: str, title: str, head: str, base: str, body: str
    ) -> str:
        """Open a pull request and return its URL."""
        data = self._request(
            "POST",
            f"/repos/{repository}/pulls",
            json={"title": title, "head": head, "base": base, "body": body},
        )
        logger.info(f"Opened pull request {data['html_url']}")
        return data["html_url"]
