"""Keep a version-qualified alias (``foo@2``) in step with the formula version."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..errors import StoreError
from ..formula import FormulaLoader, Version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AliasRename:
    """Rename of one alias file, e.g. ``foo@2`` to ``foo@3``."""

    old: str
    new: str

    def paths(self, alias_dir: Path) -> tuple[Path, Path]:
        return alias_dir / self.old, alias_dir / self.new

    def apply(self, alias_dir: Path) -> None:
        old_path, new_path = self.paths(alias_dir)
        try:
            os.rename(old_path, new_path)
        except OSError as e:
            raise StoreError(f"Unable to rename alias {old_path}: {e.strerror or e}") from e
        logger.info(f"Renamed alias {old_path} to {new_path}")

    def revert(self, alias_dir: Path) -> None:
        old_path, new_path = self.paths(alias_dir)
        if os.path.lexists(new_path):
            os.rename(new_path, old_path)
            logger.info(f"Restored alias {old_path}")


class AliasVersionSync:
    """Proposes an alias rename when the bump crosses its version boundary."""

    def propose(self, aliases: list[str], new_version: Version) -> Optional[AliasRename]:
        """
        Compute the rename for the first versioned alias, if any.

        The new suffix keeps the old alias's precision: ``foo@2`` becomes
        ``foo@3`` for version 3.5.2, never ``foo@3.5``. Nothing is proposed
        unless the new suffix is strictly greater.
        """
        versioned_alias = FormulaLoader.versioned_alias(aliases)
        if versioned_alias is None:
            return None

        name, old_alias_version = versioned_alias.rsplit("@", 1)
        segments = len(old_alias_version.split("."))
        new_alias_version = new_version.major_minor(segments)
        if new_alias_version is None:
            logger.debug(f"No {segments}-segment prefix in {new_version}; keeping {versioned_alias}")
            return None
        if Version(new_alias_version) <= Version(old_alias_version):
            return None

        return AliasRename(old=versioned_alias, new=f"{name}@{new_alias_version}")
