"""JabRef file templates wrapped around serialized BibTeX."""

from __future__ import annotations

import logging
import os
from pathlib import Path

LOGGER = logging.getLogger(__name__)

BODY_PLACEHOLDER = "BODY"

# JabRef reads the encoding header and the databaseType meta comment. The
# working template also carries keyword groups for the screening fields.
_BUILTIN_TEMPLATES: dict[str, str] = {
    "default": (
        "% Encoding: UTF-8\n"
        "\n"
        "BODY\n"
        "@Comment{jabref-meta: databaseType:bibtex;}\n"
        "\n"
        "@Comment{jabref-meta: grouping:\n"
        "0 AllEntriesGroup:;\n"
        r"1 KeywordGroup:Title TO DO\;0\;title_criteria\;TO DO\;0\;0\;1\;\;\;\;;" "\n"
        r"1 KeywordGroup:Abstract TO DO\;0\;abstract_criteria\;TO DO\;0\;0\;1\;\;\;\;;" "\n"
        r"1 KeywordGroup:Reading TO DO\;0\;reading_criteria\;TO DO\;0\;0\;1\;\;\;\;;" "\n"
        r"1 KeywordGroup:Included\;0\;reading_criteria\;YES\;0\;0\;1\;\;\;\;;" "\n"
        "}\n"
    ),
    "release": (
        "% Encoding: UTF-8\n"
        "\n"
        "BODY\n"
        "@Comment{jabref-meta: databaseType:bibtex;}\n"
    ),
}

TEMPLATE_NAMES: tuple[str, ...] = tuple(_BUILTIN_TEMPLATES)


def load_template(name: str) -> str | None:
    """Return the template text for ``name`` ("default" or "release").

    A ``<name>.bib`` file inside RAPIDREVIEW_TEMPLATE_DIR takes precedence
    over the built-in text. Unknown names return None.
    """
    if name not in _BUILTIN_TEMPLATES:
        return None

    template_dir = os.getenv("RAPIDREVIEW_TEMPLATE_DIR")
    if template_dir:
        candidate = Path(template_dir) / f"{name}.bib"
        if candidate.is_file():
            LOGGER.debug("Using template override %s", candidate)
            return candidate.read_text(encoding="utf-8")
        LOGGER.warning("Template %s not found in %s, using built-in", name, template_dir)

    return _BUILTIN_TEMPLATES[name]


def render(name: str, body: str) -> str | None:
    """Substitute ``body`` for the first BODY placeholder of a named template."""
    template = load_template(name)
    if template is None:
        return None
    return template.replace(BODY_PLACEHOLDER, body, 1)
