"""Default language code/name table.

Codes follow the etymology graph (ISO 639-3, Wiktionary codes for
reconstructed languages); names are Wiktionary's level-1 headings. The table
is injectable wherever it is used; this is only a starting set.
"""

from typing import Mapping, Optional


DEFAULT_LANGUAGE_NAMES: dict[str, str] = {
    "eng": "English",
    "enm": "Middle English",
    "ang": "Old English",
    "deu": "German",
    "goh": "Old High German",
    "nld": "Dutch",
    "non": "Old Norse",
    "isl": "Icelandic",
    "swe": "Swedish",
    "dan": "Danish",
    "nob": "Norwegian Bokmål",
    "got": "Gothic",
    "gem-pro": "Proto-Germanic",
    "lat": "Latin",
    "spa": "Spanish",
    "por": "Portuguese",
    "fra": "French",
    "fro": "Old French",
    "ita": "Italian",
    "ron": "Romanian",
    "cat": "Catalan",
    "grc": "Ancient Greek",
    "ell": "Greek",
    "rus": "Russian",
    "pol": "Polish",
    "ces": "Czech",
    "sla-pro": "Proto-Slavic",
    "gle": "Irish",
    "cym": "Welsh",
    "san": "Sanskrit",
    "fas": "Persian",
    "hin": "Hindi",
    "ine-pro": "Proto-Indo-European",
}


def language_name(code: str, names: Mapping[str, str] = DEFAULT_LANGUAGE_NAMES) -> str:
    """Display name for ``code``; unknown codes are returned unchanged."""
    return names.get(code, code)


def language_code(
    name: str,
    names: Mapping[str, str] = DEFAULT_LANGUAGE_NAMES,
) -> Optional[str]:
    """Reverse lookup of :func:`language_name`."""
    for code, candidate in names.items():
        if candidate == name:
            return code
    return None
