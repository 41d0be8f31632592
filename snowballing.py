"""Scopus search URLs for backward and forward snowballing."""

from __future__ import annotations

import logging
from urllib.parse import parse_qs

from models import Record

LOGGER = logging.getLogger(__name__)

STRATEGIES: tuple[str, ...] = ("backward", "forward")

SCOPUS_REFERENCES_URL = "https://www.scopus.com/results/references.uri"
SCOPUS_RESULTS_URL = "https://www.scopus.com/results/results.uri"

_BACKWARD_PARAMS = "sort=cp-f&src=r&imp=t&sot=citedreferences&sdt=citedreferences&sl=42"
_FORWARD_PARAMS = "sort=plfo-f&src=s&imp=t&sot=mulcite&sdt=mulcite&sl=48"
_QUERY_JOIN = "+OR+"


def build_snowballing_scopus_url(strategy: str | None, records: list[Record] | None) -> str | None:
    """Build the Scopus URL for ``strategy``; unknown strategies give None."""
    if strategy == "backward":
        return build_backward_url(records)
    if strategy == "forward":
        return build_forward_url(records)
    LOGGER.warning("Unknown snowballing strategy: %r", strategy)
    return None


def build_backward_url(records: list[Record] | None) -> str | None:
    """Search for the references cited by the given records.

    Scopus matches cited references by the numeric part of the eid, i.e.
    ``2-s2.0-85012345678`` -> ``85012345678``. A single-record search also
    needs the full eid as ``citingId``.
    """
    if not records:
        return None

    eids = [eid for eid in extract_scopus_eids(records) if len(eid.split("-")) >= 3]
    query = _QUERY_JOIN.join(eid.split("-")[2] for eid in eids)
    url = (
        f"{SCOPUS_REFERENCES_URL}?{_BACKWARD_PARAMS}"
        f"&s=CITEID%28{query}%29"
        f"&citeCnt={len(eids)}"
    )
    if len(eids) == 1:
        url += f"&citingId={eids[0]}"
    return url


def build_forward_url(records: list[Record] | None) -> str | None:
    """Search for the documents citing any of the given records."""
    if not records:
        return None

    eids = extract_scopus_eids(records)
    query = _QUERY_JOIN.join(eids)
    return (
        f"{SCOPUS_RESULTS_URL}?{_FORWARD_PARAMS}"
        f"&s=REFEID%28{query}%29&origin=resultslist"
        f"&citeCnt={len(eids)}"
        f"&mciteCt={len(eids)}"
    )


def extract_scopus_eids(records: list[Record] | None) -> list[str]:
    """Collect the ``eid`` query parameter of each record's url, in record order."""
    if not records:
        return []

    eids: list[str] = []
    for record in records:
        if not isinstance(record, Record) or not isinstance(record.fields, dict):
            continue
        url = record.fields.get("url")
        if not isinstance(url, str) or "?" not in url:
            continue
        values = parse_qs(url.split("?")[1]).get("eid")
        if values and values[0].strip():
            eids.append(values[0].strip())

    LOGGER.debug("Extracted %s Scopus eids from %s records", len(eids), len(records))
    return eids
