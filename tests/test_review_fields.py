import copy

import pytest

from models import Record
from review_fields import prepare_analysis_fields, remove_analysis_fields, tag_record

_REVIEW = ("title_criteria", "abstract_criteria", "reading_criteria")


def _record(**fields: str) -> Record:
    return Record(entry_type="article", key="doe2020", fields=dict(fields))


def test_tag_record_defaults_missing_fields_to_todo() -> None:
    record = tag_record(_record(title="A Title"))

    for name in _REVIEW:
        assert record.fields[name] == "TO DO"
    assert record.fields["title"] == "A Title"


def test_tag_record_keeps_existing_decisions() -> None:
    record = tag_record(_record(title_criteria="YES", abstract_criteria="NO"))

    assert record.fields["title_criteria"] == "YES"
    assert record.fields["abstract_criteria"] == "NO"
    assert record.fields["reading_criteria"] == "TO DO"


def test_tag_record_builds_a_record_when_absent() -> None:
    record = tag_record(None)

    assert isinstance(record, Record)
    assert record.fields == {name: "TO DO" for name in _REVIEW}


def test_tag_record_repairs_missing_field_map() -> None:
    record = Record(key="broken")
    record.fields = None  # type: ignore[assignment]

    assert tag_record(record).fields == {name: "TO DO" for name in _REVIEW}


@pytest.mark.parametrize("record", [
    None,
    Record(),
    _record(title="T", year="2020"),
    _record(title_criteria="INCONSISTENT", comment="x"),
])
def test_tagging_twice_equals_tagging_once(record: Record | None) -> None:
    once = tag_record(copy.deepcopy(record))
    twice = tag_record(tag_record(copy.deepcopy(record)))

    assert once == twice


def test_prepare_analysis_fields_empty_input() -> None:
    assert prepare_analysis_fields([]) == []
    assert prepare_analysis_fields(None) == []


def test_remove_analysis_fields_strips_only_review_fields() -> None:
    records = [
        _record(title="A", title_criteria="YES", abstract_criteria="YES", reading_criteria="YES"),
        _record(title="B", comment="note"),
    ]

    result = remove_analysis_fields(records)

    assert result[0].fields == {"title": "A"}
    assert result[1].fields == {"title": "B", "comment": "note"}


def test_remove_analysis_fields_empty_input() -> None:
    assert remove_analysis_fields(None) == []
