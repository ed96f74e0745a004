"""Error kinds raised by the bump pipeline.

Every terminal failure is a ``BumpError``; the CLI prints its message and exits
non-zero. Nothing else in the package catches these.
"""

from typing import Optional


class BumpError(Exception):
    """Base class for every terminal pipeline failure."""
    pass


class UsageError(BumpError):
    """Conflicting or missing option combination."""
    pass


class FormulaNotFoundError(UsageError):
    """No formula given and none could be guessed."""
    pass


class ResolutionError(BumpError):
    """Fetching the new resource or validating the archive failed."""
    pass


class PlanError(BumpError):
    """A replacement rule was built without a match value."""
    pass


class ApplyError(BumpError):
    """One or more replacement rules did not match the formula text."""

    def __init__(self, path, errors: list[str], text: Optional[str] = None):
        self.path = path
        self.errors = errors
        self.text = text
        details = "\n".join(f"  {e}" for e in errors)
        super().__init__(f"inreplace failed\n{path}:\n{details}")


class RegressionError(BumpError):
    """The new version is not strictly greater than the old one."""
    pass


class DuplicatePullRequestError(BumpError):
    """Open pull requests for the same formula already exist."""
    pass


class HostApiError(BumpError):
    """GitHub API request failed."""
    pass


class HostAuthError(HostApiError):
    """GitHub rejected the credentials."""
    pass


class RateLimitError(HostApiError):
    """GitHub API rate limit exceeded."""
    pass


class ForkNotReadyError(HostApiError):
    """The requested fork did not become visible before the timeout."""
    pass


class VCSError(BumpError):
    """A git command exited non-zero."""
    pass


class AuditError(BumpError):
    """The external audit reported a failure."""
    pass


class FormulaLoadError(BumpError):
    """The formula text could not be read into specs."""
    pass


class StoreError(BumpError):
    """Reading or writing the formula file failed."""
    pass
