"""Command-line interface for formula-bump."""

import argparse
import logging
import sys

from . import output
from .config import settings
from .errors import BumpError
from .ops import BumpOptions, FormulaBumper


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bump-formula-pr",
        description=(
            "Create a pull request to update a formula with a new URL or a new tag. "
            "If a URL is given, the checksum is computed by downloading it unless "
            "--sha256 is also given. If a tag is given, --revision is required."
        ),
    )
    parser.add_argument("formula", nargs="?", help="Formula name or path (guessed from --url if omitted)")

    parser.add_argument("--devel", action="store_true", help="Bump the devel spec instead of stable")
    parser.add_argument(
        "-n", "--dry-run", action="store_true",
        help="Print what would be done rather than doing it",
    )
    parser.add_argument(
        "--write", action="store_true",
        help="With --dry-run, edit the formula file but take no git actions",
    )
    parser.add_argument("--no-audit", action="store_true", help="Don't run the audit before opening the PR")
    parser.add_argument("--strict", action="store_true", help="Run the audit with --strict")
    parser.add_argument("--no-browse", action="store_true", help="Print the PR URL instead of opening it")
    parser.add_argument(
        "--no-fork", action="store_true",
        help="Push to the origin remote instead of a fork",
    )
    parser.add_argument("--mirror", help="Add a mirror URL for the new download")
    parser.add_argument("--version", help="Force the new version; 0 removes a version override")
    parser.add_argument("--message", help="Append a message to the PR body")
    parser.add_argument("--url", help="New download URL")
    parser.add_argument("--sha256", help="Checksum of the new download")
    parser.add_argument("--tag", help="New tag")
    parser.add_argument("--revision", help="Commit of the new tag")
    parser.add_argument("--tap", help="GitHub owner/repo of the tap (default: origin remote)")
    parser.add_argument("-f", "--force", action="store_true", help="Ignore duplicate open PRs")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress narration")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    parser.add_argument("-d", "--debug", action="store_true", help="Debug logging")
    return parser


def configure_logging(verbose: bool = False, debug: bool = False) -> None:
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.debug)

    options = BumpOptions(
        formula=args.formula,
        devel=args.devel,
        dry_run=args.dry_run,
        write=args.write,
        no_audit=args.no_audit,
        strict=args.strict,
        no_browse=args.no_browse,
        no_fork=args.no_fork,
        mirror=args.mirror,
        version=args.version,
        message=args.message,
        url=args.url,
        sha256=args.sha256,
        tag=args.tag,
        revision=args.revision,
        tap=args.tap,
        force=args.force,
        quiet=args.quiet,
        verbose=args.verbose,
    )

    try:
        FormulaBumper(options).run()
    except BumpError as e:
        output.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
