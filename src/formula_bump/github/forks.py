"""Forking the tap repository and waiting for the fork to appear."""

import logging
import time
from typing import Callable, Optional

from ..config import settings
from ..errors import ForkNotReadyError
from .client import GitHubClient
from .models import ForkInfo

logger = logging.getLogger(__name__)


class ForkManager:
    """Creates a fork and polls until GitHub reports it ready."""

    def __init__(
        self,
        client: Optional[GitHubClient] = None,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client or GitHubClient()
        self.poll_interval = (
            poll_interval if poll_interval is not None else settings.fork_poll_interval_seconds
        )
        self.timeout = timeout if timeout is not None else settings.fork_poll_timeout_seconds
        self._sleep = sleep
        self._clock = clock

    def fork(self, repository: str) -> ForkInfo:
        """
        Fork ``repository`` and block until the fork exists.

        Raises:
            HostAuthError, HostApiError: Fork request failed
            ForkNotReadyError: Fork still missing after the timeout
        """
        info = self.client.create_fork(repository)
        self.wait_until_ready(repository)
        return info

    def wait_until_ready(self, repository: str) -> None:
        # GitHub answers the fork request at once but the fork takes a few seconds.
        deadline = self._clock() + self.timeout
        while not self.client.fork_exists(repository):
            if self._clock() >= deadline:
                raise ForkNotReadyError(
                    f"Fork of {repository} was not ready after {self.timeout:g} seconds"
                )
            logger.debug(f"Fork of {repository} not ready, retrying in {self.poll_interval}s")
            self._sleep(self.poll_interval)
