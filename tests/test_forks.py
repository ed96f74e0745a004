"""Tests for fork creation and readiness polling."""

from unittest.mock import Mock

import pytest

from formula_bump.errors import ForkNotReadyError
from formula_bump.github import ForkInfo, ForkManager

FORK = ForkInfo(
    clone_url="https://github.com/someone/tap.git",
    ssh_url="git@github.com:someone/tap.git",
    owner="someone",
)


@pytest.fixture
def mock_client():
    client = Mock()
    client.create_fork.return_value = FORK
    return client


class TestForkManager:
    """Tests for ForkManager."""

    def test_fork_waits_until_ready(self, mock_client):
        mock_client.fork_exists.side_effect = [False, False, True]
        sleep = Mock()
        manager = ForkManager(mock_client, poll_interval=1.0, timeout=60.0, sleep=sleep, clock=lambda: 0.0)

        assert manager.fork("owner/tap") == FORK
        assert sleep.call_count == 2
        sleep.assert_called_with(1.0)

    def test_fork_already_ready(self, mock_client):
        mock_client.fork_exists.return_value = True
        sleep = Mock()
        manager = ForkManager(mock_client, poll_interval=1.0, timeout=60.0, sleep=sleep)

        manager.fork("owner/tap")

        sleep.assert_not_called()

    def test_fork_times_out(self, mock_client):
        mock_client.fork_exists.return_value = False
        clock = Mock(side_effect=[0.0, 0.5, 1.5])
        sleep = Mock()
        manager = ForkManager(mock_client, poll_interval=0.5, timeout=1.0, sleep=sleep, clock=clock)

        with pytest.raises(ForkNotReadyError, match="not ready after 1 seconds"):
            manager.fork("owner/tap")

        assert sleep.call_count == 1
