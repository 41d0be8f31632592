"""Exception types raised by the curation pipeline."""

from __future__ import annotations


class RapidReviewError(Exception):
    """Base class for every error the pipeline raises on purpose."""


class BibtexError(RapidReviewError):
    """BibTeX text could not be converted to records, or back."""


class ReviewStateError(RapidReviewError):
    """A review field was moved along a transition that is not allowed."""


class UnknownWorkflowError(RapidReviewError):
    """The requested workflow name is not one of the known stage plans."""


class MissingInputError(RapidReviewError):
    """A workflow that starts from an input bib file was given none."""


class MissingOutputError(RapidReviewError):
    """The save stage could not resolve a path to write to."""
