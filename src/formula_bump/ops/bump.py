"""Bump a formula to a new version and open a pull request for it."""

import logging
import os
import webbrowser
from pathlib import Path
from typing import Callable, Optional

from .. import output
from ..config import Settings, settings as default_settings
from ..engine import (
    AliasRename,
    AliasVersionSync,
    ApplyMode,
    AuditRunner,
    FormulaDiffer,
    PatchApplier,
    ReplacementPlanBuilder,
    VersionSafetyCheck,
    VersionSpecResolver,
)
from ..errors import AuditError, FormulaLoadError, HostApiError, UsageError
from ..fetch import ResourceFetcher
from ..formula import Formula, FormulaLoader, FormulaStore, Version
from ..github import DuplicateProposalGuard, ForkManager, GitHubClient
from ..vcs import Git
from .models import BumpOptions, BumpResult

logger = logging.getLogger(__name__)

PR_SIGNATURE = "Created with `bump-formula-pr`."


class FormulaBumper:
    """
    Runs one bump end to end.

    The formula file is the only persistent state touched before the git
    steps. Its content is captured before the first write, and any failure
    after that write restores it (and reverts an alias rename) before the
    error propagates.
    """

    def __init__(
        self,
        options: BumpOptions,
        config: Optional[Settings] = None,
        github: Optional[GitHubClient] = None,
        fetcher: Optional[ResourceFetcher] = None,
        git_factory: Optional[Callable[[Path], Git]] = None,
        audit: Optional[AuditRunner] = None,
        forks: Optional[ForkManager] = None,
        open_browser: Optional[Callable[[str], None]] = None,
    ):
        self.options = options
        self.settings = config or default_settings
        self.github = github or GitHubClient(
            token=self.settings.github_token,
            base_url=self.settings.github_api_url,
            timeout=self.settings.github_timeout_seconds,
        )
        self.loader = FormulaLoader(self.settings.tap_path)
        self.resolver = VersionSpecResolver(
            fetcher
            or ResourceFetcher(
                cache_dir=self.settings.cache_dir,
                timeout=self.settings.download_timeout_seconds,
            )
        )
        self.planner = ReplacementPlanBuilder()
        self.safety = VersionSafetyCheck(self.loader)
        self.alias_sync = AliasVersionSync()
        self.guard = DuplicateProposalGuard(self.github)
        self.forks = forks or ForkManager(
            self.github,
            poll_interval=self.settings.fork_poll_interval_seconds,
            timeout=self.settings.fork_poll_timeout_seconds,
        )
        env = self._user_env()
        self._git_factory = git_factory or (lambda path: Git(path, env=env))
        self.audit = audit or AuditRunner(self.settings.audit_command, env=env)
        self._open_browser = open_browser or self._browse
        self._applied_alias: Optional[AliasRename] = None

    def _user_env(self) -> Optional[dict]:
        if not self.settings.user_path:
            return None
        return {**os.environ, "PATH": self.settings.user_path}

    def _browse(self, url: str) -> None:
        try:
            if self.settings.browser:
                webbrowser.get(self.settings.browser).open(url)
            else:
                webbrowser.open(url)
        except webbrowser.Error as e:
            logger.warning(f"Could not open a browser: {e}")
            print(url)

    def _say(self, message: str) -> None:
        if not self.options.quiet:
            output.heading(message)

    def _load_formula(self) -> Formula:
        opts = self.options
        if opts.formula:
            path = self.loader.resolve(opts.formula)
        else:
            path = self.loader.guess_from_url(opts.url, devel=opts.devel)
            logger.info(f"Guessed formula {path.stem} from {opts.url}")
        return self.loader.load(path)

    def _repository(self, git: Git) -> str:
        repository = self.options.tap or git.origin_repository()
        if not repository:
            raise UsageError(
                f"Unable to determine the GitHub repository of {git.repo_path}; pass --tap=owner/repo."
            )
        return repository

    def run(self) -> BumpResult:
        """
        Execute the bump.

        Raises:
            BumpError: Any terminal failure; the formula file is unchanged or
                restored when this propagates
        """
        opts = self.options
        opts.validate_combination()
        request = opts.update_request()
        self.resolver.validate_request(request)

        formula = self._load_formula()
        git = self._git_factory(formula.tap_path)
        repository = self._repository(git)
        self.guard.check(formula.name, repository, force=opts.force, quiet=opts.quiet)

        kind = opts.requested_spec
        spec = formula.spec(kind)
        if spec is None:
            raise UsageError(f"{formula.name}: no {kind} specification found!")

        update = self.resolver.resolve(formula, spec, request)

        old_version = spec.version
        if old_version is None:
            raise FormulaLoadError(f"{formula.name}: unable to determine the {kind} version")

        store = FormulaStore(formula.path)
        plan = self.planner.build(formula, spec, update, store.read(), old_version, opts.version)

        if opts.writes_files:
            store.backup()
        applier = PatchApplier(narrate=self._say)
        mode = ApplyMode.COMMIT if opts.writes_files else ApplyMode.PREVIEW
        patch = applier.apply_to_file(store, plan, mode)

        try:
            result = self._after_patch(formula, git, repository, store, old_version, patch.old_text, patch.new_text)
        except Exception:
            self._rollback(formula, store)
            raise
        store.discard_backup()
        return result

    def _after_patch(
        self,
        formula: Formula,
        git: Git,
        repository: str,
        store: FormulaStore,
        old_version: Version,
        old_text: str,
        new_text: str,
    ) -> BumpResult:
        opts = self.options
        kind = opts.requested_spec

        diff = None
        if opts.dry_run:
            formula_diff = FormulaDiffer().diff(old_text, new_text, formula.path.name)
            if not formula_diff.is_empty:
                diff = formula_diff.to_diff_string()
                if not opts.quiet:
                    print(diff, end="")

        check = self.safety.check(
            formula, kind, old_version, new_text, store if opts.writes_files else None
        )
        new_version = check.new_version

        alias_rename = self.alias_sync.propose(formula.aliases, new_version)
        if alias_rename:
            self._say(f"renaming alias {alias_rename.old} to {alias_rename.new}")

        self._run_audit(formula, alias_rename)

        branch = f"{formula.name}-{new_version}"
        result = BumpResult(
            formula=formula.name,
            spec=kind,
            old_version=str(old_version),
            new_version=str(new_version),
            dry_run=opts.dry_run,
            branch=branch,
            alias_rename=(alias_rename.old, alias_rename.new) if alias_rename else None,
            diff=diff,
        )

        if opts.dry_run:
            self._narrate_git_steps(formula, git, branch, str(new_version), alias_rename)
        else:
            result.pull_request_url = self._open_pull_request(
                formula, git, repository, branch, str(new_version), alias_rename
            )
        return result

    def _run_audit(self, formula: Formula, alias_rename: Optional[AliasRename]) -> None:
        opts = self.options
        if opts.dry_run:
            if opts.no_audit:
                self._say("Skipping audit")
            else:
                self._say(self.audit.describe(formula.path, strict=opts.strict))
            return

        if alias_rename and formula.alias_dir is not None:
            alias_rename.apply(formula.alias_dir)
            self._applied_alias = alias_rename

        if opts.no_audit:
            self._say("Skipping audit")
            return
        if not self.audit.run(formula.path, strict=opts.strict):
            raise AuditError("audit failed!")

    def _commit_message(self, formula: Formula, version: str) -> str:
        devel_message = " (devel)" if self.options.devel else ""
        return f"{formula.name} {version}{devel_message}"

    def _changed_files(self, formula: Formula, alias_rename: Optional[AliasRename]) -> list[Path]:
        files = [formula.path]
        if alias_rename and formula.alias_dir is not None:
            files.extend(alias_rename.paths(formula.alias_dir))
        return files

    def _narrate_git_steps(
        self,
        formula: Formula,
        git: Git,
        branch: str,
        version: str,
        alias_rename: Optional[AliasRename],
    ) -> None:
        origin_branch = f"origin/{self.settings.base_branch}"
        changed_files = " ".join(str(p) for p in self._changed_files(formula, alias_rename))
        if not self.options.no_fork:
            self._say("try to fork repository with GitHub API")
        if git.is_shallow():
            self._say("git fetch --unshallow origin")
        if alias_rename:
            self._say(f"git add {alias_rename.old} {alias_rename.new}")
        self._say(f"git checkout --no-track -b {branch} {origin_branch}")
        self._say(
            "git commit --no-edit --verbose "
            f"--message='{self._commit_message(formula, version)}' -- {changed_files}"
        )
        self._say(f"git push --set-upstream $REMOTE {branch}:{branch}")
        self._say(f"git checkout --quiet {git.current_branch()}")
        self._say("create pull request with GitHub API")

    def _open_pull_request(
        self,
        formula: Formula,
        git: Git,
        repository: str,
        branch: str,
        version: str,
        alias_rename: Optional[AliasRename],
    ) -> str:
        opts = self.options
        previous_branch = git.current_branch()
        origin_branch = f"origin/{self.settings.base_branch}"

        if opts.no_fork:
            remote_url = git.push_url("origin")
            username = repository.split("/", 1)[0]
        else:
            try:
                fork = self.forks.fork(repository)
            except HostApiError as e:
                raise type(e)(f"Unable to fork: {e}!") from e
            remote_url = fork.ssh_url if git.uses_ssh_remote() else fork.clone_url
            username = fork.owner

        if git.is_shallow():
            git.fetch_unshallow("origin")
        if alias_rename and formula.alias_dir is not None:
            git.add(list(alias_rename.paths(formula.alias_dir)))
        git.checkout_new_branch(branch, origin_branch)
        git.commit(self._commit_message(formula, version), self._changed_files(formula, alias_rename))
        git.push(remote_url, branch)
        git.checkout(previous_branch)

        body = f"{PR_SIGNATURE}\n"
        if opts.message:
            body += f"\n---\n\n{opts.message}\n"

        try:
            url = self.github.create_pull_request(
                repository,
                self._commit_message(formula, version),
                f"{username}:{branch}",
                self.settings.base_branch,
                body,
            )
        except HostApiError as e:
            raise type(e)(f"Unable to open pull request: {e}!") from e

        if opts.no_browse:
            print(url)
        else:
            self._open_browser(url)
        return url

    def _rollback(self, formula: Formula, store: FormulaStore) -> None:
        store.restore()
        if self._applied_alias is not None and formula.alias_dir is not None:
            self._applied_alias.revert(formula.alias_dir)
            self._applied_alias = None
