"""Interactive resolution of missing or invalid workflow arguments.

This module is the only place that talks to the terminal before a run; the
pipeline itself receives fully resolved ``WorkflowArgs``. Invalid answers are
re-asked by click until they validate.
"""

from __future__ import annotations

import click

from fs_store import directory_exists, file_exists
from pipeline import WorkflowArgs
from snowballing import STRATEGIES

_INPUT_TYPE = click.Path(exists=True, dir_okay=False)
_OUTPUT_TYPE = click.Path(dir_okay=False)
_DIRECTORY_TYPE = click.Path(exists=True, file_okay=False)


def is_input_valid(path: str | None) -> bool:
    return file_exists(path)


def is_output_valid(path: str | None) -> bool:
    return bool(path) and not directory_exists(path)


def is_directory_valid(path: str | None) -> bool:
    return directory_exists(path)


def resolve(workflow: str, args: WorkflowArgs) -> WorkflowArgs:
    """Fill the arguments ``workflow`` needs, asking only for what is missing."""
    if args.suppress_output:
        return args

    if workflow in ("prepare", "sanitize", "snowballing"):
        _ask_input(args)
    if workflow in ("prepare", "sanitize"):
        _ask_output(args)
    if workflow in ("sanitize", "build"):
        _ask_directory(args)
    if workflow == "snowballing":
        _ask_strategy(args)
    return args


def _ask_input(args: WorkflowArgs) -> None:
    if not is_input_valid(args.input):
        args.input = click.prompt("Please, inform the input bib file (path)", type=_INPUT_TYPE)


def _ask_output(args: WorkflowArgs) -> None:
    if args.overwrite or is_output_valid(args.output):
        return
    args.overwrite = click.confirm("Do you want to overwrite the input bib file?", default=True)
    if not args.overwrite:
        args.output = click.prompt("Please, inform the output bib file (path)", type=_OUTPUT_TYPE)


def _ask_directory(args: WorkflowArgs) -> None:
    if not is_directory_valid(args.directory):
        args.directory = click.prompt(
            "Please, inform the working directory (path)", type=_DIRECTORY_TYPE
        )


def _ask_strategy(args: WorkflowArgs) -> None:
    if args.strategy not in STRATEGIES:
        args.strategy = click.prompt(
            "Choose the snowballing strategy", type=click.Choice(STRATEGIES)
        )
