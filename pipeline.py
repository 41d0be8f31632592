"""Stage plans for the four curation workflows.

Every stage is a plain function ``(args, context) -> context``. A workflow is
an ordered list of stages run strictly one after the other over a single
``RunContext``; a stage may be skipped (saving and printing, when writing or
output is suppressed) without affecting the stages after it. The first stage
that raises aborts the rest of the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import fs_store
import templates
from bibtex_io import read_bibtex, records_to_bibtex
from errors import MissingInputError, MissingOutputError, UnknownWorkflowError
from filters import filter_by_inclusion
from fs_store import BibFile
from models import Collection, RunContext
from review_fields import prepare_analysis_fields, remove_analysis_fields
from sanitizer import sanitize_duplicate, sanitize_inconsistent
from snowballing import build_snowballing_scopus_url

LOGGER = logging.getLogger(__name__)

RELEASE_FILENAME = "release-dataset.bib"


@dataclass(slots=True)
class WorkflowArgs:
    """Fully resolved arguments for one workflow run."""

    input: str | None = None
    output: str | None = None
    directory: str | None = None
    strategy: str | None = None
    overwrite: bool = False
    suppress_output: bool = False
    suppress_writing: bool = False


StageHandler = Callable[[WorkflowArgs, RunContext], RunContext]


@dataclass(frozen=True, slots=True)
class Stage:
    title: str
    handler: StageHandler
    skip: bool = False


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_input_bib(args: WorkflowArgs, context: RunContext) -> RunContext:
    if not args.input:
        raise MissingInputError("An input bib file is required for this workflow")

    collection = _parse_bib_file(fs_store.read_file(args.input), "input")
    context.collections = [*context.collections, collection]
    return context


def parse_directory_bibs(args: WorkflowArgs, context: RunContext) -> RunContext:
    if not args.directory:
        return context

    bib_files = fs_store.read_directory_bib_files(args.directory, exclude=args.input)
    collections = fs_store.map_in_order(_parse_directory_bib, bib_files)
    LOGGER.info("Parsed %s bib files from %s", len(collections), args.directory)
    context.collections = [*context.collections, *collections]
    return context


def _parse_directory_bib(bib_file: BibFile) -> Collection:
    return _parse_bib_file(bib_file, "directory")


def _parse_bib_file(bib_file: BibFile, source: str) -> Collection:
    records, header = read_bibtex(bib_file.contents)
    LOGGER.info("Parsed %s records from %s", len(records), bib_file.path)
    return Collection(
        name=bib_file.name,
        path=bib_file.path,
        source=source,
        records=records,
        header=header,
    )


# ---------------------------------------------------------------------------
# Review fields and classification
# ---------------------------------------------------------------------------

def prepare_fields(args: WorkflowArgs, context: RunContext) -> RunContext:
    for collection in context.collections:
        collection.records = prepare_analysis_fields(collection.records)
    return context


def remove_fields(args: WorkflowArgs, context: RunContext) -> RunContext:
    for collection in context.collections:
        collection.records = remove_analysis_fields(collection.records)
    return context


def mark_inconsistent(args: WorkflowArgs, context: RunContext) -> RunContext:
    target = context.input_collection()
    if target is not None:
        target.records = sanitize_inconsistent(target.records)
        context.collections = [target, *context.other_collections()]
    return context


def mark_duplicates(args: WorkflowArgs, context: RunContext) -> RunContext:
    target = context.input_collection()
    if target is not None:
        existing = context.other_collections()
        target.records = sanitize_duplicate(target.name, target.records, existing)
        context.collections = [target, *existing]
    return context


def filter_included(args: WorkflowArgs, context: RunContext) -> RunContext:
    for collection in context.collections:
        before = len(collection.records)
        collection.records = filter_by_inclusion(collection.records)
        LOGGER.info(
            "Inclusion filter: file=%s total=%s kept=%s",
            collection.name,
            before,
            len(collection.records),
        )
    return context


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def build_snowballing_url(args: WorkflowArgs, context: RunContext) -> RunContext:
    target = context.input_collection()
    if target is not None:
        context.response = build_snowballing_scopus_url(args.strategy, target.records)
    return context


def build_default_bib(args: WorkflowArgs, context: RunContext) -> RunContext:
    target = context.input_collection()
    if target is not None:
        context.response = templates.render("default", records_to_bibtex(target.records, target.header))
    return context


def build_release_bib(args: WorkflowArgs, context: RunContext) -> RunContext:
    records = [record for collection in context.collections for record in collection.records]
    context.response = templates.render("release", records_to_bibtex(records))
    return context


def save(args: WorkflowArgs, context: RunContext) -> RunContext:
    output = args.input if args.overwrite else args.output
    if not output:
        raise MissingOutputError("No output path was resolved for the bib file")

    context.output = output
    fs_store.save_file(output, context.response or "")
    return context


def release(args: WorkflowArgs, context: RunContext) -> RunContext:
    if not args.directory:
        raise MissingOutputError("A working directory is required to save the release file")

    context.output = fs_store.build_path(args.directory, RELEASE_FILENAME)
    fs_store.save_file(context.output, context.response or "")
    return context


def print_output_path(args: WorkflowArgs, context: RunContext) -> RunContext:
    if context.output:
        print(f"\nOutput path: {context.output}\n")
    return context


def print_scopus_url(args: WorkflowArgs, context: RunContext) -> RunContext:
    if context.response:
        print(f"\nScopus URL: {context.response}\n")
    return context


# ---------------------------------------------------------------------------
# Workflows
# ---------------------------------------------------------------------------

def prepare_stages(args: WorkflowArgs) -> list[Stage]:
    return [
        Stage("Parsing the bib file", parse_input_bib),
        Stage("Adding analysis fields in documents", prepare_fields),
        Stage("Building the bib file", build_default_bib),
        Stage("Saving the bib file", save, args.suppress_writing),
        Stage("Printing the output path", print_output_path, args.suppress_output),
    ]


def sanitize_stages(args: WorkflowArgs) -> list[Stage]:
    return [
        Stage("Parsing the bib file", parse_input_bib),
        Stage("Parsing the working directory bib files", parse_directory_bibs),
        Stage("Marking inconsistent documents", mark_inconsistent),
        Stage("Marking duplicate documents", mark_duplicates),
        Stage("Building the bib file", build_default_bib),
        Stage("Saving the bib file", save, args.suppress_writing),
        Stage("Printing the output path", print_output_path, args.suppress_output),
    ]


def snowballing_stages(args: WorkflowArgs) -> list[Stage]:
    return [
        Stage("Parsing the bib file", parse_input_bib),
        Stage("Filtering the bib file documents", filter_included),
        Stage("Building the snowballing Scopus URL", build_snowballing_url),
        Stage("Printing the Scopus URL", print_scopus_url, args.suppress_output),
    ]


def build_stages(args: WorkflowArgs) -> list[Stage]:
    return [
        Stage("Parsing the working directory bib files", parse_directory_bibs),
        Stage("Filtering the bib file documents", filter_included),
        Stage("Removing analysis fields in documents", remove_fields),
        Stage("Building the bib file", build_release_bib),
        Stage("Saving the bib file", release, args.suppress_writing),
        Stage("Printing the output path", print_output_path, args.suppress_output),
    ]


WORKFLOWS: dict[str, Callable[[WorkflowArgs], list[Stage]]] = {
    "prepare": prepare_stages,
    "sanitize": sanitize_stages,
    "snowballing": snowballing_stages,
    "build": build_stages,
}


def execute(stages: list[Stage], args: WorkflowArgs, context: RunContext | None = None) -> RunContext:
    """Run ``stages`` in order, threading one context through them."""
    context = context if context is not None else RunContext()
    for stage in stages:
        if stage.skip:
            LOGGER.info("Skipping: %s", stage.title)
            continue
        LOGGER.info("%s", stage.title)
        context = stage.handler(args, context)
    return context


def run(workflow: str, args: WorkflowArgs) -> RunContext:
    """Execute one named workflow and return its final context.

    ``context.response`` holds the serialized bib text or the Scopus URL and
    ``context.output`` the written path, when a file was saved.
    """
    plan = WORKFLOWS.get(workflow)
    if plan is None:
        raise UnknownWorkflowError(f"Unknown workflow: {workflow!r}")

    LOGGER.info("Starting workflow=%s", workflow)
    context = execute(plan(args), args)
    LOGGER.info("Workflow complete: workflow=%s output=%s", workflow, context.output)
    return context
