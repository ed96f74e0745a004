"""Data models for a bump run."""

from typing import Optional

from pydantic import BaseModel

from ..engine.resolver import UpdateRequest
from ..errors import FormulaNotFoundError, UsageError
from ..formula import SpecKind


class BumpOptions(BaseModel):
    """Options for one bump, as given on the command line."""

    formula: Optional[str] = None  # name or path; guessed from --url when absent
    devel: bool = False
    dry_run: bool = False
    write: bool = False  # with dry_run: edit files but take no git actions
    no_audit: bool = False
    strict: bool = False
    no_browse: bool = False
    no_fork: bool = False
    mirror: Optional[str] = None
    version: Optional[str] = None
    message: Optional[str] = None
    url: Optional[str] = None
    sha256: Optional[str] = None
    tag: Optional[str] = None
    revision: Optional[str] = None
    tap: Optional[str] = None  # GitHub owner/repo of the tap
    force: bool = False
    quiet: bool = False
    verbose: bool = False

    @property
    def requested_spec(self) -> SpecKind:
        return "devel" if self.devel else "stable"

    @property
    def writes_files(self) -> bool:
        """True when the formula file is modified on disk."""
        return not self.dry_run or self.write

    def validate_combination(self) -> None:
        """
        Reject flag combinations that conflict.

        Raises:
            UsageError: On any conflict
        """
        if self.write and not self.dry_run:
            raise UsageError("Option --write requires --dry-run.")
        if self.no_audit and self.strict:
            raise UsageError("Options --no-audit and --strict are mutually exclusive.")
        if self.tap and self.tap.count("/") != 1:
            raise UsageError(f"Invalid --tap={self.tap}; expected owner/repo.")
        if not self.formula and not self.url:
            raise FormulaNotFoundError("No formula specified and no --url= to guess it from.")

    def update_request(self) -> UpdateRequest:
        return UpdateRequest(
            url=self.url,
            checksum=self.sha256,
            tag=self.tag,
            revision=self.revision,
            mirror=self.mirror,
            version=self.version,
        )


class BumpResult(BaseModel):
    """What a bump run did."""

    formula: str
    spec: SpecKind
    old_version: str
    new_version: str
    dry_run: bool
    branch: Optional[str] = None
    pull_request_url: Optional[str] = None
    alias_rename: Optional[tuple[str, str]] = None
    diff: Optional[str] = None
