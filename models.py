"""Shared typed models for the curation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from errors import ReviewStateError

TITLE_CRITERIA = "title_criteria"
ABSTRACT_CRITERIA = "abstract_criteria"
READING_CRITERIA = "reading_criteria"
COMMENT = "comment"

REVIEW_FIELDS: tuple[str, ...] = (TITLE_CRITERIA, ABSTRACT_CRITERIA, READING_CRITERIA)


class ReviewState(str, Enum):
    """Screening decision stored in each of the three review fields."""

    TODO = "TO DO"
    YES = "YES"
    NO = "NO"
    INCONSISTENT = "INCONSISTENT"
    DUPLICATED = "DUPLICATED"
    NOT_APPLICABLE = "N/A"

    @classmethod
    def parse(cls, value: object) -> ReviewState | None:
        """Return the state for a raw field value, or None for free text."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None

    def can_transition_to(self, target: ReviewState) -> bool:
        return target in _TRANSITIONS.get(self, frozenset())


_TRANSITIONS: dict[ReviewState, frozenset[ReviewState]] = {
    ReviewState.TODO: frozenset({
        ReviewState.INCONSISTENT,
        ReviewState.DUPLICATED,
        ReviewState.YES,
        ReviewState.NO,
    }),
}


@dataclass(slots=True)
class Record:
    """One bibliographic entry: type tag, citation key and open field map.

    ``fields`` is deliberately schema-less. The review fields and ``comment``
    are reserved keys and should only be changed through the methods below.
    """

    entry_type: str = "misc"
    key: str = ""
    fields: dict[str, str] = field(default_factory=dict)

    def review_state(self, name: str = TITLE_CRITERIA) -> ReviewState | None:
        if not isinstance(self.fields, dict):
            return None
        return ReviewState.parse(self.fields.get(name))

    def ensure_review_fields(self) -> None:
        """Default missing review fields to TO DO, keeping existing values."""
        if not isinstance(self.fields, dict):
            self.fields = {}
        for name in REVIEW_FIELDS:
            if name not in self.fields:
                self.fields[name] = ReviewState.TODO.value

    def strip_review_fields(self) -> None:
        if not isinstance(self.fields, dict):
            return
        for name in REVIEW_FIELDS:
            self.fields.pop(name, None)

    def mark_inconsistent(self, comment: str) -> None:
        self._close_review(ReviewState.INCONSISTENT, comment)

    def mark_duplicated(self, comment: str) -> None:
        self._close_review(ReviewState.DUPLICATED, comment)

    def _close_review(self, state: ReviewState, comment: str) -> None:
        current = self.review_state(TITLE_CRITERIA)
        if current is None or not current.can_transition_to(state):
            raw = self.fields.get(TITLE_CRITERIA) if isinstance(self.fields, dict) else None
            raise ReviewStateError(
                f"Cannot move {TITLE_CRITERIA} of '{self.key}' from {raw!r} to {state.value!r}"
            )
        self.fields[TITLE_CRITERIA] = state.value
        self.fields[ABSTRACT_CRITERIA] = ReviewState.NOT_APPLICABLE.value
        self.fields[READING_CRITERIA] = ReviewState.NOT_APPLICABLE.value
        self.fields[COMMENT] = comment


@dataclass(slots=True)
class BibHeader:
    """@string definitions and @preamble blocks of one bib file.

    Values are kept in the form the BibTeX reader produced them so they can
    be written back unchanged.
    """

    strings: dict[str, Any] = field(default_factory=dict)
    preambles: list[Any] = field(default_factory=list)


@dataclass(slots=True)
class Collection:
    """Records parsed from one bib file, in file order."""

    name: str
    path: str
    source: str = "input"
    records: list[Record] = field(default_factory=list)
    header: BibHeader = field(default_factory=BibHeader)


@dataclass(slots=True)
class RunContext:
    """State threaded through the stages of one workflow run."""

    collections: list[Collection] = field(default_factory=list)
    response: str | None = None
    output: str | None = None

    def input_collection(self) -> Collection | None:
        return next((c for c in self.collections if c.source == "input"), None)

    def other_collections(self) -> list[Collection]:
        return [c for c in self.collections if c.source != "input"]
