"""External audit of the rewritten formula (``brew audit`` by default)."""

import logging
import subprocess
from pathlib import Path
from typing import Optional

from ..config import settings
from ..errors import AuditError

logger = logging.getLogger(__name__)


class AuditRunner:
    """
    Runs the audit command against a formula file.

    The command's own output goes straight to the terminal; only the exit
    status is interpreted.
    """

    def __init__(self, command: Optional[list[str]] = None, env: Optional[dict] = None):
        self.command = list(command) if command else list(settings.audit_command)
        self.env = env

    def command_for(self, path: Path, strict: bool = False) -> list[str]:
        command = list(self.command)
        if strict:
            command.append("--strict")
        command.append(str(path))
        return command

    def describe(self, path: Path, strict: bool = False) -> str:
        """The command line as shown in dry runs."""
        command = self.command_for(Path(path.name), strict)
        return " ".join(command)

    def run(self, path: Path, strict: bool = False) -> bool:
        """
        Run the audit.

        Returns:
            True when the audit passed

        Raises:
            AuditError: The audit command could not be started
        """
        command = self.command_for(path, strict)
        logger.info(f"Running {' '.join(command)}")
        try:
            result = subprocess.run(command, env=self.env)
        except OSError as e:
            raise AuditError(f"Unable to run {command[0]}: {e}") from e
        return result.returncode == 0
