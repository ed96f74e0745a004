"""Patch application engine for formula text."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from ..errors import ApplyError
from ..formula.store import FormulaStore, normalize_encoding
from .rules import MutationPlan

logger = logging.getLogger(__name__)


class ApplyMode(str, Enum):
    """How a plan is applied."""

    PREVIEW = "preview"  # compute only
    COMMIT = "commit"  # compute, then atomically replace the file


@dataclass
class PatchResult:
    """Outcome of applying a plan."""

    old_text: str
    new_text: str
    errors: list[str] = field(default_factory=list)
    written: bool = False

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def changed(self) -> bool:
        return self.old_text != self.new_text


class PatchApplier:
    """Applies a MutationPlan to formula text, strictly in plan order."""

    def __init__(self, narrate: Optional[Callable[[str], None]] = None):
        self.narrate = narrate

    def apply(self, text: str, plan: MutationPlan, encoding_errors: Optional[list[str]] = None) -> PatchResult:
        """
        Apply every rule to one buffer without touching the file system.

        Each rule sees the text as left by the rules before it. Rules that
        match nothing are collected rather than skipped, so the caller can
        reject the whole plan.
        """
        errors = list(encoding_errors or [])
        buffer = text
        for rule in plan:
            if self.narrate:
                self.narrate(rule.describe())
            buffer, count = rule.apply(buffer)
            if count == 0:
                errors.append(
                    f"expected replacement of {rule.search_pattern!r} with {rule.replace_with!r}"
                )
                logger.debug(f"Rule matched nothing: {rule.describe()}")
        return PatchResult(old_text=text, new_text=buffer, errors=errors)

    def apply_to_file(
        self,
        store: FormulaStore,
        plan: MutationPlan,
        mode: ApplyMode = ApplyMode.PREVIEW,
    ) -> PatchResult:
        """
        Apply a plan to a formula file.

        In preview mode nothing is written. In commit mode the file is replaced
        as a whole, and only when every rule matched.

        Raises:
            ApplyError: One or more rules matched nothing, or the file had
                undecodable bytes. Nothing has been written when this is raised.
        """
        text, encoding_errors = normalize_encoding(store.read_bytes())
        result = self.apply(text, plan, encoding_errors)

        if not result.success:
            raise ApplyError(store.path, result.errors, result.new_text)

        if mode == ApplyMode.COMMIT:
            store.atomic_write(result.new_text)
            result.written = True
            logger.info(f"Applied {len(plan)} replacements to {store.path}")
        return result
