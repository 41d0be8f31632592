"""Flat-file access for bib files and working directories."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, TypeVar

LOGGER = logging.getLogger(__name__)

BIB_EXTENSION = ".bib"
_DEFAULT_PARSE_WORKERS = 4

S = TypeVar("S")
T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class BibFile:
    """Raw contents of one file plus where it came from."""

    path: str
    name: str
    contents: str


def build_path(*parts: str) -> str:
    return str(Path(*parts))


def file_exists(path: str | None) -> bool:
    return bool(path) and Path(path).is_file()


def directory_exists(path: str | None) -> bool:
    return bool(path) and Path(path).is_dir()


def read_file(path: str) -> BibFile:
    file_path = Path(path)
    contents = file_path.read_text(encoding="utf-8")
    return BibFile(path=str(file_path), name=file_path.name, contents=contents)


def list_directory_bib_files(directory: str, exclude: str | None = None) -> list[Path]:
    """Return the .bib files directly inside ``directory``, sorted by name.

    ``exclude`` is compared by basename so an input file given with any
    relative or absolute path is still left out.
    """
    excluded_name = Path(exclude).name if isinstance(exclude, str) and exclude else None
    paths = [
        item
        for item in Path(directory).iterdir()
        if item.is_file() and item.suffix == BIB_EXTENSION and item.name != excluded_name
    ]
    return sorted(paths, key=lambda item: item.name)


def read_directory_bib_files(directory: str, exclude: str | None = None) -> list[BibFile]:
    return map_in_order(read_file, [str(path) for path in list_directory_bib_files(directory, exclude)])


def map_in_order(func: Callable[[S], T], items: list[S]) -> list[T]:
    """Apply ``func`` to every item on a thread pool, returning results in input order."""
    if not items:
        return []

    workers = max(1, min(_parse_workers(), len(items)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(func, items))

    LOGGER.debug("Processed %s files with %s workers", len(results), workers)
    return results


def save_file(path: str, contents: str) -> None:
    Path(path).write_text(contents, encoding="utf-8")
    LOGGER.info("Wrote %s characters to %s", len(contents), path)


def _parse_workers() -> int:
    raw = os.getenv("RAPIDREVIEW_PARSE_WORKERS", str(_DEFAULT_PARSE_WORKERS))
    try:
        return int(raw)
    except ValueError:
        LOGGER.warning("Ignoring invalid RAPIDREVIEW_PARSE_WORKERS=%r", raw)
        return _DEFAULT_PARSE_WORKERS
