"""Classifiers that close the review of unusable records.

Two passes run over the input collection of a ``sanitize`` workflow:

- ``sanitize_inconsistent`` marks records lacking year, title or author.
- ``sanitize_duplicate`` marks records equivalent to one seen earlier, either
  in another collection of the working directory or earlier in the same file.

Both only touch records whose ``title_criteria`` is still TO DO.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from models import TITLE_CRITERIA, Collection, Record, ReviewState
from review_fields import tag_record

LOGGER = logging.getLogger(__name__)

INCONSISTENT_COMMENT = "Consider checking before proceeding."
DUPLICATED_COMMENT = "Entry already exists in {filename}."

_MANDATORY_FIELDS: tuple[str, ...] = ("year", "title", "author")
_TITLE_STRIP_RE = re.compile(r"[-:]")
_WHITESPACE_RUN_RE = re.compile(r"\s{2,}")


def sanitize_inconsistent(records: list[Record | None] | None) -> list[Record]:
    if not records:
        return []

    marked = 0
    result: list[Record] = []
    for record in records:
        record = tag_record(record)
        if is_inconsistent(record):
            record.mark_inconsistent(INCONSISTENT_COMMENT)
            marked += 1
        result.append(record)

    LOGGER.info("Inconsistency check: total=%s marked=%s", len(result), marked)
    return result


def is_inconsistent(record: Record) -> bool:
    if record.review_state(TITLE_CRITERIA) is not ReviewState.TODO:
        return False
    return any(_blank(record.fields.get(name)) for name in _MANDATORY_FIELDS)


def sanitize_duplicate(
    filename: str,
    records: list[Record | None] | None,
    existing: list[Collection] | None = None,
) -> list[Record]:
    """Mark records of ``filename`` that duplicate any record scanned before them."""
    if not records:
        return []

    detector = DuplicateDetector()
    for collection in existing or []:
        detector.seed(collection.name, collection.records)

    result = [detector.check(filename, record) for record in records]
    LOGGER.info(
        "Duplicate check: file=%s total=%s marked=%s seen=%s",
        filename,
        len(result),
        detector.marked,
        detector.seen,
    )
    return result


class DuplicateDetector:
    """Streaming equivalence test against every record accumulated so far.

    Records are looked up by normalized DOI and by (year, normalized title).
    Each index keeps the position of the first record that produced a key, so
    the reported source is always the earliest equivalent record in scan
    order. Nothing is ever removed from the indices.
    """

    def __init__(self) -> None:
        self.seen = 0
        self.marked = 0
        self._by_doi: dict[str, tuple[int, str]] = {}
        self._by_title_year: dict[tuple[str, str], tuple[int, str]] = {}

    def seed(self, filename: str, records: list[Record]) -> None:
        for record in records:
            self._remember(filename, record)

    def check(self, filename: str, record: Record | None) -> Record:
        record = tag_record(record)
        if record.review_state(TITLE_CRITERIA) is ReviewState.TODO:
            replica = self.find_replica(record)
            if replica is not None:
                record.mark_duplicated(DUPLICATED_COMMENT.format(filename=replica))
                self.marked += 1
        self._remember(filename, record)
        return record

    def find_replica(self, record: Record) -> str | None:
        """Return the collection name of the earliest equivalent record, if any."""
        hits = []
        doi_key = doi_identity(record)
        if doi_key is not None and doi_key in self._by_doi:
            hits.append(self._by_doi[doi_key])
        title_key = title_year_identity(record)
        if title_key is not None and title_key in self._by_title_year:
            hits.append(self._by_title_year[title_key])
        if not hits:
            return None
        return min(hits)[1]

    def _remember(self, filename: str, record: Record | None) -> None:
        position = self.seen
        self.seen += 1
        if not isinstance(record, Record):
            return
        doi_key = doi_identity(record)
        if doi_key is not None:
            self._by_doi.setdefault(doi_key, (position, filename))
        title_key = title_year_identity(record)
        if title_key is not None:
            self._by_title_year.setdefault(title_key, (position, filename))


def doi_identity(record: Record) -> str | None:
    if not isinstance(record.fields, dict):
        return None
    doi = record.fields.get("doi")
    if _blank(doi):
        return None
    return doi.strip().casefold()


def title_year_identity(record: Record) -> tuple[str, str] | None:
    if not isinstance(record.fields, dict):
        return None
    year = record.fields.get("year")
    title = record.fields.get("title")
    if _blank(year) or _blank(title):
        return None
    return year.strip().casefold(), normalize_title(title)


def normalize_title(title: str) -> str:
    formatted = _TITLE_STRIP_RE.sub("", title.strip().upper())
    return _WHITESPACE_RUN_RE.sub(" ", formatted)


def _blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()
