"""BibTeX <-> Record conversion on top of bibtexparser."""

from __future__ import annotations

import logging
import re
from typing import Any

import bibtexparser
from bibtexparser.bibdatabase import (
    COMMON_STRINGS,
    BibDatabase,
    BibDataString,
    BibDataStringExpression,
    UndefinedString,
)
from bibtexparser.bparser import BibTexParser
from bibtexparser.bwriter import BibTexWriter

from errors import BibtexError
from models import BibHeader, Record

LOGGER = logging.getLogger(__name__)

PARSE_FAILURE = "Unable to parse the BibTex to Object."
WRITE_FAILURE = "Unable to parse the Object to BibTex."

_ENTRY_TYPE_KEY = "ENTRYTYPE"
_ID_KEY = "ID"

# bibtexparser keeps any block it cannot read as an implicit comment starting
# at its "@". Explicit @comment text never starts with one.
_UNPARSED_BLOCK_RE = re.compile(r"\s*@\s*[A-Za-z]")


class MacroValue(str):
    """Field text expanded from a macro expression such as ``month = jan``.

    Behaves as the expanded text everywhere and remembers the expression so
    an unchanged value is written back as the macro.
    """

    def __new__(cls, expression: BibDataStringExpression) -> MacroValue:
        value = super().__new__(cls, _expand(expression))
        value.expression = expression
        return value


def read_bibtex(contents: str) -> tuple[list[Record], BibHeader]:
    """Parse BibTeX text into records plus its @string/@preamble blocks.

    Raises BibtexError when any block of the text could not be read, so a
    malformed entry is never dropped silently.
    """
    # BibTexParser accumulates into its own database, so never share one.
    parser = BibTexParser(
        common_strings=True,
        interpolate_strings=False,
        ignore_nonstandard_types=False,
    )
    try:
        database = bibtexparser.loads(contents or "", parser=parser)
    except Exception:  # parser internals are not part of our contract
        raise BibtexError(PARSE_FAILURE) from None

    unparsed = [text for text in database.comments if _UNPARSED_BLOCK_RE.match(text)]
    if unparsed:
        LOGGER.debug("Unreadable BibTeX block: %.80r", unparsed[0])
        raise BibtexError(PARSE_FAILURE)

    records = [_entry_to_record(entry) for entry in database.entries]
    header = BibHeader(
        strings={
            name: value
            for name, value in database.strings.items()
            if COMMON_STRINGS.get(name) != value
        },
        preambles=list(database.preambles),
    )
    LOGGER.debug(
        "Parsed %s BibTeX entries, %s strings, %s preambles",
        len(records),
        len(header.strings),
        len(header.preambles),
    )
    return records, header


def bibtex_to_records(contents: str) -> list[Record]:
    """Parse BibTeX text into records, dropping @comment/@string/@preamble blocks."""
    records, _ = read_bibtex(contents)
    return records


def records_to_bibtex(records: list[Record], header: BibHeader | None = None) -> str:
    """Serialize records back to BibTeX, keeping their order.

    With a ``header`` its blocks are written first and unchanged macro values
    are written as macros. Without one every value is written as plain text.
    """
    keep_macros = header is not None
    database = BibDatabase()
    database.entries = [_record_to_entry(record, keep_macros) for record in records or []]
    if header is not None:
        database.strings.update(header.strings)
        database.preambles = list(header.preambles)

    writer = BibTexWriter()
    writer.indent = "  "
    writer.order_entries_by = None
    try:
        return bibtexparser.dumps(database, writer=writer)
    except Exception:
        raise BibtexError(WRITE_FAILURE) from None


def _entry_to_record(entry: dict[str, Any]) -> Record:
    fields = {
        name: MacroValue(value) if isinstance(value, BibDataStringExpression) else value
        for name, value in entry.items()
        if name not in (_ENTRY_TYPE_KEY, _ID_KEY)
    }
    return Record(
        entry_type=str(entry.get(_ENTRY_TYPE_KEY, "misc")),
        key=str(entry.get(_ID_KEY, "")),
        fields=fields,
    )


def _record_to_entry(record: Record, keep_macros: bool) -> dict[str, Any]:
    entry = {
        name: _field_to_bibtex(value, keep_macros)
        for name, value in (record.fields or {}).items()
    }
    entry[_ENTRY_TYPE_KEY] = record.entry_type or "misc"
    entry[_ID_KEY] = record.key or ""
    return entry


def _field_to_bibtex(value: Any, keep_macros: bool) -> Any:
    if isinstance(value, MacroValue):
        return value.expression if keep_macros else str(value)
    return value if isinstance(value, str) else str(value)


def _expand(expression: BibDataStringExpression) -> str:
    parts = []
    for part in expression.expr:
        if isinstance(part, BibDataString):
            try:
                parts.append(part.get_value())
            except UndefinedString:
                parts.append(part.name)
        else:
            parts.append(part)
    return "".join(parts)
