"""Data models for formulae and their source specs."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .version import Version

SpecKind = Literal["stable", "devel"]


class Checksum(BaseModel):
    """Checksum declared for a download."""

    hash_type: str = "sha256"
    hexdigest: str


class Spec(BaseModel):
    """One source description of a formula (stable or devel)."""

    kind: SpecKind
    url: Optional[str] = None
    checksum: Optional[Checksum] = None
    mirrors: list[str] = Field(default_factory=list)
    tag: Optional[str] = None
    revision: Optional[str] = None  # VCS commit, not the packaging revision
    version_override: Optional[str] = None  # explicit `version "..."` line

    @property
    def is_url_style(self) -> bool:
        return self.checksum is not None

    @property
    def is_tag_style(self) -> bool:
        return self.checksum is None and self.tag is not None and self.revision is not None

    @property
    def version(self) -> Optional[Version]:
        """Version in precedence order: explicit override, tag, URL."""
        if self.version_override:
            return Version(self.version_override)
        if self.tag:
            version = Version.from_tag(self.tag)
            if version is not None:
                return version
        if self.url:
            return Version.parse(self.url)
        return None


class Formula(BaseModel):
    """A formula file and the specs declared in it."""

    name: str
    path: Path
    aliases: list[str] = Field(default_factory=list)
    alias_dir: Optional[Path] = None
    revision: int = 0  # packaging revision counter
    stable: Optional[Spec] = None
    devel: Optional[Spec] = None

    def spec(self, kind: SpecKind) -> Optional[Spec]:
        """Return the stable or devel spec."""
        return self.devel if kind == "devel" else self.stable

    @property
    def tap_path(self) -> Path:
        """Root of the repository holding the formula."""
        path = self.path.resolve()
        for parent in path.parents:
            if parent.name == "Formula":
                return parent.parent
        return path.parent
