"""CLI entrypoint for the rapid review curation workflows."""

from __future__ import annotations

import argparse
import logging
import os
import sys

import click
from dotenv import load_dotenv

import prompt
from errors import RapidReviewError
from pipeline import WorkflowArgs, run
from snowballing import STRATEGIES

__version__ = "1.0.0"

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rapidreview",
        description="A command-line interface (CLI) to support rapid review studies",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress prompts and printed output; arguments are used as given",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Do not write any file; the resulting bib text is printed instead",
    )

    commands = parser.add_subparsers(dest="command", required=True, metavar="command")

    prepare = commands.add_parser("prepare", help="prepare the analysis fields")
    _add_input(prepare)
    _add_output(prepare)

    sanitize = commands.add_parser("sanitize", help="mark inconsistent and duplicate documents")
    _add_input(sanitize)
    _add_output(sanitize)
    _add_directory(sanitize)

    snowballing = commands.add_parser("snowballing", help="generate the Scopus URL")
    _add_input(snowballing)
    snowballing.add_argument("-s", "--strategy", choices=STRATEGIES, help="snowballing strategy")

    build = commands.add_parser("build", help="build release bib file")
    _add_directory(build)

    return parser


def _add_input(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-i", "--input", metavar="FILEPATH", help="filepath of the bib file")


def _add_output(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-o", "--output", metavar="FILEPATH", help="filepath of the output bib file")
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="write the result back to the input bib file",
    )


def _add_directory(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-d", "--directory", metavar="DIRPATH", help="filepath of the working directory")


def to_workflow_args(args: argparse.Namespace) -> WorkflowArgs:
    return WorkflowArgs(
        input=getattr(args, "input", None),
        output=getattr(args, "output", None),
        directory=getattr(args, "directory", None),
        strategy=getattr(args, "strategy", None),
        overwrite=getattr(args, "overwrite", False),
        suppress_output=args.quiet,
        suppress_writing=args.dry_run,
    )


def main(argv: list[str] | None = None) -> int:
    """Parse flags, resolve missing arguments and run one workflow."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    raw_level = os.getenv("RAPIDREVIEW_LOG_LEVEL", "INFO")
    level = raw_level.strip().upper()
    known = level in logging.getLevelNamesMapping()
    if args.quiet:
        level = "WARNING"
    elif not known:
        level = "INFO"
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")
    if not known:
        LOGGER.warning("Ignoring invalid RAPIDREVIEW_LOG_LEVEL=%r", raw_level)

    try:
        workflow_args = prompt.resolve(args.command, to_workflow_args(args))
    except click.Abort:
        print("Aborted!", file=sys.stderr)
        return 1

    try:
        context = run(args.command, workflow_args)
    except (RapidReviewError, OSError) as exc:
        LOGGER.debug("Workflow %s failed", args.command, exc_info=True)
        print(f"caught exception with message {exc}", file=sys.stderr)
        return 1

    if workflow_args.suppress_writing and args.command != "snowballing" and context.response:
        sys.stdout.write(context.response)
    return 0


if __name__ == "__main__":
    sys.exit(main())
