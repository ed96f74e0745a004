"""Build the ordered replacement plan that moves a formula to its new version."""

import logging
import re
from typing import Optional

from ..errors import PlanError
from ..formula import Formula, Spec, Version
from .resolver import SpecUpdate
from .rules import MutationPlan

logger = logging.getLogger(__name__)


def _template(value: str) -> str:
    """Escape text that is spliced into a regex replacement template."""
    return value.replace("\\", "\\\\")


# any text inside a devel block, stopping before its closing `end`
_DEVEL_BODY = r"(?:(?!^  end\n).)*?"


def _url_statement(url: str) -> str:
    """Pattern for a whole `url "..."` statement.

    Continuation lines follow a trailing comma; the statement ends at the first
    line that does not end in one.
    """
    return rf'url "{re.escape(url)}"(?:,[ \t]*\n[^\n]*?)*(?<!,)\n'


class ReplacementPlanBuilder:
    """
    Builds a MutationPlan from a resolved SpecUpdate.

    Rule order matters: later rules match against text produced by earlier
    ones, e.g. the mirror and version insertions anchor on the new URL line.
    """

    def build(
        self,
        formula: Formula,
        spec: Spec,
        update: SpecUpdate,
        contents: str,
        old_version: Version,
        forced_version: Optional[str] = None,
    ) -> MutationPlan:
        """
        Build the plan.

        Args:
            formula: The formula being bumped
            spec: Snapshot of the spec before the bump
            update: Resolved new field values
            contents: Current formula text (used to pick the version strategy)
            old_version: Version of the spec before the bump
            forced_version: Explicit version, or "0" to remove an override

        Raises:
            PlanError: A rule would have no value to match
        """
        plan = MutationPlan()

        if spec.kind == "stable" and formula.revision:
            # keep a following head/devel opener, dropping the blank line before it
            plan.regex(r"^  revision \d+\n(\n(  (?:head|devel)\b))?", r"\g<2>")

        for mirror in spec.mirrors:
            plan.regex(rf' +mirror "{re.escape(mirror)}"\n', "")

        if update.is_url_hash:
            old_hash = spec.checksum.hexdigest if spec.checksum else None
            plan.literal(spec.url, update.url)
            plan.literal(old_hash, update.checksum)
        else:
            plan.literal(spec.tag, update.tag)
            plan.literal(spec.revision, update.revision)

        anchor_url = update.url or spec.url
        if update.mirror:
            if not anchor_url:
                raise PlanError(f"No URL to anchor mirror {update.mirror}!")
            plan.regex(
                rf"^( +)({_url_statement(anchor_url)})",
                rf'\g<1>\g<2>\g<1>mirror "{_template(update.mirror)}"\n',
            )

        if forced_version:
            if Version(forced_version).is_sentinel:
                self._remove_version(plan, spec)
            else:
                self._force_version(plan, spec, update, contents, old_version, forced_version, anchor_url)

        logger.debug(f"Built plan with {len(plan)} rules for {formula.name} ({spec.kind})")
        return plan

    @staticmethod
    def _force_version(
        plan: MutationPlan,
        spec: Spec,
        update: SpecUpdate,
        contents: str,
        old_version: Version,
        forced_version: str,
        anchor_url: Optional[str],
    ) -> None:
        version_line = f'version "{_template(forced_version)}"\n'
        if spec.kind == "stable":
            if f'version "{old_version}"' in contents:
                plan.literal(f'version "{old_version}"', f'version "{forced_version}"')
            elif update.mirror:
                plan.regex(
                    rf'^( +)(mirror "{re.escape(update.mirror)}"\n)',
                    rf"\g<1>\g<2>\g<1>{version_line}",
                )
            else:
                if not anchor_url:
                    raise PlanError(f"No URL to anchor version {forced_version}!")
                plan.regex(
                    rf"^( +)({_url_statement(anchor_url)})",
                    rf"\g<1>\g<2>\g<1>{version_line}",
                )
        else:
            plan.regex(
                rf'(^  devel do\n{_DEVEL_BODY}^ +version "){re.escape(str(old_version))}("\n)',
                rf"\g<1>{_template(forced_version)}\g<2>",
                flags=re.MULTILINE | re.DOTALL,
            )

    @staticmethod
    def _remove_version(plan: MutationPlan, spec: Spec) -> None:
        if spec.kind == "stable":
            plan.regex(r'^  version "[\w.\-+]+"\n', "")
        else:
            plan.regex(
                rf'(^  devel do\n{_DEVEL_BODY})^ +version "[^\n]+"\n',
                r"\g<1>",
                flags=re.MULTILINE | re.DOTALL,
            )
