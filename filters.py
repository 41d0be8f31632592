"""Field/value selection used to keep included records."""

from __future__ import annotations

from models import READING_CRITERIA, Record, ReviewState

INCLUSION_FIELD = READING_CRITERIA
INCLUSION_VALUE = ReviewState.YES.value


def filter_by_field_value(records: list[Record] | None, field: str, value: str) -> list[Record]:
    """Return the records whose ``field`` equals ``value`` exactly.

    Records without a field map, or without the field, are dropped. Nothing
    is mutated.
    """
    if not records or not isinstance(field, str):
        return []

    return [
        record
        for record in records
        if isinstance(record, Record)
        and isinstance(record.fields, dict)
        and field in record.fields
        and record.fields[field] == value
    ]


def filter_by_inclusion(records: list[Record] | None) -> list[Record]:
    """Keep only the records accepted at the full-text reading stage."""
    return filter_by_field_value(records, INCLUSION_FIELD, INCLUSION_VALUE)
