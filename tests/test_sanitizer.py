import pytest

from models import Collection, Record
from sanitizer import (
    DUPLICATED_COMMENT,
    INCONSISTENT_COMMENT,
    normalize_title,
    sanitize_duplicate,
    sanitize_inconsistent,
)


def _record(key: str = "doe2020", **fields: str) -> Record:
    base = {"title": "A Study of Things", "year": "2020", "author": "Doe, Jane"}
    base.update(fields)
    return Record(entry_type="article", key=key, fields=base)


def _bare(key: str, **fields: str) -> Record:
    return Record(entry_type="article", key=key, fields=dict(fields))


def _collection(name: str, *records: Record) -> Collection:
    return Collection(name=name, path=f"/work/{name}", source="directory", records=list(records))


# ---------------------------------------------------------------------------
# Inconsistency
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("missing", ["year", "title", "author"])
def test_missing_mandatory_field_is_inconsistent(missing: str) -> None:
    record = _record()
    del record.fields[missing]

    [result] = sanitize_inconsistent([record])

    assert result.fields["title_criteria"] == "INCONSISTENT"
    assert result.fields["abstract_criteria"] == "N/A"
    assert result.fields["reading_criteria"] == "N/A"
    assert result.fields["comment"] == INCONSISTENT_COMMENT


def test_blank_mandatory_field_is_inconsistent() -> None:
    [result] = sanitize_inconsistent([_record(author="   ")])
    assert result.fields["title_criteria"] == "INCONSISTENT"


def test_non_text_mandatory_field_is_inconsistent() -> None:
    record = _record()
    record.fields["year"] = 2020  # type: ignore[assignment]

    [result] = sanitize_inconsistent([record])
    assert result.fields["title_criteria"] == "INCONSISTENT"


def test_complete_record_is_only_tagged() -> None:
    [result] = sanitize_inconsistent([_record()])

    assert result.fields["title_criteria"] == "TO DO"
    assert "comment" not in result.fields


@pytest.mark.parametrize("decision", ["YES", "NO", "DUPLICATED", "whatever"])
def test_already_classified_record_is_never_reclassified(decision: str) -> None:
    record = _bare("x", title_criteria=decision)

    [result] = sanitize_inconsistent([record])

    assert result.fields["title_criteria"] == decision
    assert "comment" not in result.fields


def test_inconsistency_check_is_idempotent() -> None:
    first = sanitize_inconsistent([_bare("x", title="Only a title")])
    snapshot = dict(first[0].fields)

    second = sanitize_inconsistent(first)

    assert second[0].fields == snapshot


def test_sanitize_inconsistent_empty_input() -> None:
    assert sanitize_inconsistent([]) == []
    assert sanitize_inconsistent(None) == []


# ---------------------------------------------------------------------------
# Duplicates
# ---------------------------------------------------------------------------

def test_normalize_title_strips_punctuation_and_whitespace_runs() -> None:
    assert normalize_title("  Deep-Learning:  a   Survey ") == "DEEPLEARNING A SURVEY"


def _flags_later(first: Record, later: Record, where: str) -> bool:
    if where == "same file":
        result = sanitize_duplicate("input.bib", [first, later])[1]
    else:
        [result] = sanitize_duplicate("input.bib", [later], [_collection("other.bib", first)])
    return result.fields["title_criteria"] == "DUPLICATED"


WHERE = pytest.mark.parametrize("where", ["same file", "other collection"])


@WHERE
def test_shared_doi_is_duplicate_regardless_of_title_and_year(where: str) -> None:
    a = _record("a", doi="10.1000/ABC", title="One", year="2001")
    b = _record("b", doi="  10.1000/abc ", title="Two", year="2022")

    assert _flags_later(a, b, where) is True


@WHERE
@pytest.mark.parametrize("first_title, later_title", [
    ("Deep Learning: A Survey", "deep learning  a survey"),
    ("Self-Supervised Learning", "  selfsupervised   LEARNING"),
    ("A:B-C", "abc"),
])
def test_normalized_title_and_year_is_duplicate_without_doi(
    where: str, first_title: str, later_title: str
) -> None:
    a = _record("a", title=first_title, year="2020")
    b = _record("b", title=later_title, year=" 2020 ")

    assert _flags_later(a, b, where) is True


@WHERE
def test_records_differing_on_both_rules_are_not_duplicates(where: str) -> None:
    a = _record("a", doi="10.1/a", title="First", year="2020")
    b = _record("b", doi="10.1/b", title="Second", year="2020")

    assert _flags_later(a, b, where) is False


@WHERE
def test_same_title_different_year_is_not_duplicate(where: str) -> None:
    assert _flags_later(_record("a", year="2019"), _record("b", year="2020"), where) is False


@WHERE
def test_blank_doi_and_blank_title_never_match(where: str) -> None:
    a = _bare("a", doi=" ", title="", year="2020")
    b = _bare("b", doi=" ", title="", year="2020")

    assert _flags_later(a, b, where) is False


def test_later_record_is_flagged_not_earlier() -> None:
    a = _bare("a", title_criteria="TO DO", doi="10.1/X")
    b = _bare("b", doi="10.1/X")

    result = sanitize_duplicate("input.bib", [a, b])

    assert result[0].fields["title_criteria"] == "TO DO"
    assert result[1].fields["title_criteria"] == "DUPLICATED"
    assert result[1].fields["comment"] == DUPLICATED_COMMENT.format(filename="input.bib")


def test_duplicate_comment_names_the_other_collection() -> None:
    existing = [
        _collection("alpha.bib", _record("x", doi="10.1/other")),
        _collection("beta.bib", _record("y", doi="10.1/X")),
    ]

    [result] = sanitize_duplicate("input.bib", [_record("z", doi="10.1/x", title="Else")], existing)

    assert result.fields["title_criteria"] == "DUPLICATED"
    assert result.fields["abstract_criteria"] == "N/A"
    assert result.fields["reading_criteria"] == "N/A"
    assert result.fields["comment"] == "Entry already exists in beta.bib."


def test_earliest_equivalent_record_wins() -> None:
    existing = [
        _collection("alpha.bib", _record("x", title="Shared Title", doi="10.1/a")),
        _collection("beta.bib", _record("y", title="Other", doi="10.1/b")),
    ]
    # Matches beta by DOI and alpha by title/year; alpha was seen first.
    candidate = _record("z", title="Shared Title", doi="10.1/b")

    [result] = sanitize_duplicate("input.bib", [candidate], existing)

    assert result.fields["comment"] == "Entry already exists in alpha.bib."


def test_only_todo_records_are_marked() -> None:
    existing = [_collection("alpha.bib", _record("x", doi="10.1/X"))]
    decided = _record("y", doi="10.1/X", title_criteria="YES")

    [result] = sanitize_duplicate("input.bib", [decided], existing)

    assert result.fields["title_criteria"] == "YES"
    assert "comment" not in result.fields


def test_duplicates_still_join_the_seen_set() -> None:
    existing = [_collection("alpha.bib", _record("x", doi="10.1/X"))]
    first = _record("y", doi="10.1/X", title="Paper", year="2021")
    second = _record("z", title="Paper", year="2021")

    result = sanitize_duplicate("input.bib", [first, second], existing)

    assert result[0].fields["comment"] == "Entry already exists in alpha.bib."
    assert result[1].fields["comment"] == "Entry already exists in input.bib."


def test_untagged_input_records_are_tagged_and_order_is_kept() -> None:
    records = [_bare("a", title="One", year="2020"), _bare("b", title="Two", year="2020")]

    result = sanitize_duplicate("input.bib", records, [])

    assert [r.key for r in result] == ["a", "b"]
    assert all(r.fields["title_criteria"] == "TO DO" for r in result)


def test_sanitize_duplicate_empty_input() -> None:
    existing = [_collection("alpha.bib", _record())]
    assert sanitize_duplicate("input.bib", [], existing) == []
    assert sanitize_duplicate("input.bib", None) == []
