"""Guard against opening a pull request that already exists."""

import logging
import re
from typing import Optional

from .. import output
from ..errors import DuplicatePullRequestError, RateLimitError
from .client import GitHubClient
from .models import PullRequestRef

logger = logging.getLogger(__name__)

DUPLICATE_ERROR = "Duplicate PRs should not be opened. Use --force to override this error."


class DuplicateProposalGuard:
    """Looks for open pull requests about the same formula."""

    def __init__(self, client: Optional[GitHubClient] = None):
        self.client = client or GitHubClient()

    def find_duplicates(self, name: str, repository: str) -> list[PullRequestRef]:
        """
        Open pull requests whose title names the formula as a whole word.

        A rate-limited search counts as finding nothing: the check is
        best-effort.
        """
        try:
            candidates = self.client.search_open_pull_requests(name, repository)
        except RateLimitError as e:
            output.warning(str(e))
            return []

        title_re = re.compile(rf"(^|\s){re.escape(name)}(:|\s|$)", re.IGNORECASE)
        return [
            pr for pr in candidates
            if pr.is_pull_request and title_re.search(pr.title)
        ]

    def check(self, name: str, repository: str, force: bool = False, quiet: bool = False) -> list[PullRequestRef]:
        """
        Apply the duplicate policy.

        ========  ========  ===================================
        force     quiet     outcome
        ========  ========  ===================================
        yes       no        warn with the list, continue
        no        yes       abort with a short error
        no        no        abort with the list and guidance
        yes       yes       continue silently
        ========  ========  ===================================

        Returns:
            The duplicates found (empty when none)

        Raises:
            DuplicatePullRequestError: Duplicates found and ``force`` not set
        """
        duplicates = self.find_duplicates(name, repository)
        if not duplicates:
            return duplicates

        logger.info(f"Found {len(duplicates)} possible duplicate pull requests for {name}")
        listing = "These open pull requests may be duplicates:\n" + "\n".join(
            f"{pr.title} {pr.html_url}" for pr in duplicates
        )

        if force and not quiet:
            output.warning(listing)
        elif not force and quiet:
            raise DuplicatePullRequestError(DUPLICATE_ERROR)
        elif not force:
            raise DuplicatePullRequestError(f"{listing}\n{DUPLICATE_ERROR}")
        return duplicates
