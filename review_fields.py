"""Adding and removing the three screening fields on records."""

from __future__ import annotations

from models import Record


def tag_record(record: Record | None) -> Record:
    """Return ``record`` carrying all review fields, defaulting missing ones to TO DO.

    An absent record becomes an empty ``misc`` entry. Existing values are
    never overwritten, so tagging twice is the same as tagging once.
    """
    if not isinstance(record, Record):
        record = Record()
    record.ensure_review_fields()
    return record


def prepare_analysis_fields(records: list[Record | None] | None) -> list[Record]:
    if not records:
        return []
    return [tag_record(record) for record in records]


def remove_analysis_fields(records: list[Record] | None) -> list[Record]:
    """Strip the review fields for release. ``comment`` is kept."""
    if not records:
        return []
    for record in records:
        if isinstance(record, Record):
            record.strip_review_fields()
    return records
