"""SPARQL query generation for cognate searches.

The generated query walks the etymology graph in two directions:

    source --derivesFrom*--> ancestor <--derivesFrom*-- target

and returns every single derivation edge lying on either leg, one edge per
binding (``childWord childLang parentWord parentLang``). Lineages are
reassembled from those edges by :mod:`cognate_finder.services.hydrate`.

Pure: no I/O, deterministic for equal inputs.
"""

import re
from typing import Optional

from cognate_finder.config import Settings, get_settings
from cognate_finder.core import SearchParams, SparqlQuery
from cognate_finder.errors import EmptyWordError, InvalidLanguageError


# Wiktionary language codes: "en", "spa", "ine-pro", "gem-pro", "la-vul"
LANG_CODE_PATTERN = re.compile(r"^[a-z]{2,3}(?:-[a-z0-9]{2,8})*$", re.IGNORECASE)

RESULT_VARS = ("childWord", "childLang", "parentWord", "parentLang")

_SPARQL_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}


def is_bound_morpheme(word: str) -> bool:
    """Affixes and combining forms are written with a hyphen at a word edge.

    ``-ly``, ``un-`` and ``-o-`` are bound; ``self-esteem`` is not.
    """
    word = word.strip()
    return len(word) > 1 and (word.startswith("-") or word.endswith("-"))


def escape_literal(value: str) -> str:
    """Escape ``value`` for use inside a double-quoted SPARQL string."""
    return "".join(_SPARQL_ESCAPES.get(ch, ch) for ch in value)


def validate_params(params: SearchParams) -> SearchParams:
    """Return ``params`` with a trimmed word, or raise a validation error."""
    word = params.word.strip()
    if not word:
        raise EmptyWordError()
    if not LANG_CODE_PATTERN.match(params.src_lang):
        raise InvalidLanguageError(params.src_lang, field="src_lang")
    if not LANG_CODE_PATTERN.match(params.trg_lang):
        raise InvalidLanguageError(params.trg_lang, field="trg_lang")
    return params.model_copy(update={"word": word})


def build_sparql_query(
    params: SearchParams,
    settings: Optional[Settings] = None,
) -> SparqlQuery:
    """Build the cognate query for ``params``.

    Raises:
        EmptyWordError: word is blank after trimming
        InvalidLanguageError: a language code is malformed
    """
    settings = settings or get_settings()
    params = validate_params(params)

    derives = settings.derivation_predicate
    label = settings.label_predicate
    lang = settings.language_predicate

    word = escape_literal(params.word)
    src_lang = escape_literal(params.src_lang)
    trg_lang = escape_literal(params.trg_lang)

    affix_filter = ""
    if not params.allow_prefixes_and_suffixes:
        affix_filter = (
            '\n  FILTER (!STRSTARTS(STR(?targetLabel), "-")'
            ' && !STRENDS(STR(?targetLabel), "-"))'
        )

    leg = (
        "    {start} {derives}* ?child .\n"
        "    ?child {derives} ?parent .\n"
        "    ?parent {derives}* ?ancestor ."
    )

    sparql = f"""{settings.sparql_prologue}

SELECT DISTINCT ?{' ?'.join(RESULT_VARS)}
WHERE {{
  ?source {label} ?sourceLabel ;
    {lang} "{src_lang}" .
  FILTER (STR(?sourceLabel) = "{word}")

  ?source {derives}* ?ancestor .
  ?target {derives}* ?ancestor ;
    {label} ?targetLabel ;
    {lang} "{trg_lang}" .{affix_filter}

  {{
{leg.format(start="?source", derives=derives)}
  }}
  UNION
  {{
{leg.format(start="?target", derives=derives)}
  }}

  ?child {label} ?childLabel ;
    {lang} ?childLangCode .
  ?parent {label} ?parentLabel ;
    {lang} ?parentLangCode .

  BIND (STR(?childLabel) AS ?childWord)
  BIND (STR(?childLangCode) AS ?childLang)
  BIND (STR(?parentLabel) AS ?parentWord)
  BIND (STR(?parentLangCode) AS ?parentLang)
}}
"""

    return SparqlQuery(sparql=sparql, params=params)
