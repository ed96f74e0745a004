"""Version safety validation for patched formulae."""

import logging
from dataclasses import dataclass
from typing import Optional

from ..errors import RegressionError
from ..formula import Formula, FormulaLoader, FormulaStore, SpecKind, Version

logger = logging.getLogger(__name__)


@dataclass
class SafetyCheck:
    """Result of comparing the old and re-derived new versions."""

    old_version: Version
    new_version: Version

    @property
    def is_downgrade(self) -> bool:
        return self.new_version < self.old_version

    @property
    def is_unchanged(self) -> bool:
        return self.new_version == self.old_version

    @property
    def allowed(self) -> bool:
        return self.new_version > self.old_version


class VersionSafetyCheck:
    """
    Re-derives the version from patched text and rejects non-increases.

    The version is always parsed from the result of the patch, never taken
    from values captured while planning: replacement rules can miss or
    over-match on unusual formula text.
    """

    def __init__(self, loader: Optional[FormulaLoader] = None):
        self.loader = loader or FormulaLoader()

    def derive(self, formula: Formula, kind: SpecKind, contents: str) -> Version:
        return self.loader.formula_version(formula.name, formula.path, kind, contents)

    def check(
        self,
        formula: Formula,
        kind: SpecKind,
        old_version: Version,
        new_contents: str,
        store: Optional[FormulaStore] = None,
    ) -> SafetyCheck:
        """
        Validate the patched text.

        Args:
            formula: The formula being bumped
            kind: Which spec was bumped
            old_version: Version before the patch
            new_contents: Formula text after the patch
            store: Store holding the backup to restore on rejection

        Returns:
            SafetyCheck for an allowed bump

        Raises:
            RegressionError: The new version is lower than or equal to the old
        """
        new_version = self.derive(formula, kind, new_contents)
        result = SafetyCheck(old_version=old_version, new_version=new_version)

        if result.is_downgrade:
            self._restore(store)
            raise RegressionError(
                "You probably need to bump this formula manually since changing the\n"
                f"version from {old_version} to {new_version} would be a downgrade."
            )
        if result.is_unchanged:
            self._restore(store)
            raise RegressionError(
                "You probably need to bump this formula manually since the new version\n"
                f"and old version are both {new_version}."
            )

        logger.info(f"{formula.name}: {old_version} -> {new_version}")
        return result

    @staticmethod
    def _restore(store: Optional[FormulaStore]) -> None:
        if store is not None and store.restore():
            logger.warning(f"Rolled back {store.path}")
