"""Cognate Finder command line.

Commands:
- search: find cognates and record the search in the session
- query: print the generated SPARQL without running it
- resume: show the last recorded search
- define: print a word's definition from Wiktionary
- suggest: autocomplete a partial word
- serve: run the HTTP API
"""

import asyncio

import click
from bs4 import BeautifulSoup
from rich.console import Console
from rich.text import Text

from cognate_finder.config import get_settings
from cognate_finder.core import CognateChain, SearchParams, is_cognate_error
from cognate_finder.core.languages import language_name
from cognate_finder.core.params import paginate, to_query_string
from cognate_finder.errors import ValidationError
from cognate_finder.interop import SparqlClient, WiktionaryClient
from cognate_finder.services import (
    CognateService,
    DefinitionService,
    SuggestionService,
    build_sparql_query,
    hydrate,
)
from cognate_finder.storage import MemoCache, SessionStore

console = Console()


def render_chain(chain: CognateChain) -> Text:
    """``ancestor → src…`` on one line, ``→ trg…`` below, target in bold."""
    text = Text(str(chain.ancestor), style="dim")
    text.append("\n  ")
    for ref in chain.src:
        text.append(" → ", style="dim")
        text.append(str(ref), style="dim")
    text.append("\n  ")
    for i, ref in enumerate(chain.trg):
        text.append(" → ", style="dim")
        last = i == len(chain.trg) - 1
        text.append(str(ref), style="bold green" if last else "dim")
    return text


@click.group()
def cli():
    """Cognate Finder CLI"""
    pass


@cli.command()
@click.argument('word')
@click.option('--src', 'src_lang', default='spa', help='Source language code')
@click.option('--trg', 'trg_lang', default='eng', help='Target language code')
@click.option('--affixes', is_flag=True, help='Allow prefixes and suffixes as cognates')
@click.option('--page', default=1, type=int, help='Page of results to show')
@click.option('--show-query', is_flag=True, help='Print the SPARQL query as well')
def search(word, src_lang, trg_lang, affixes, page, show_query):
    """Find cognates of WORD in the target language."""

    async def _search():
        settings = get_settings()
        session = SessionStore(settings.session_file)

        async with SparqlClient(settings.sparql_endpoint, timeout=settings.http_timeout) as client:
            service = CognateService(
                client, settings, cache=MemoCache(session.cognate_seed())
            )
            with console.status("Searching..."):
                result = await service.fetch_cognates(word, src_lang, trg_lang, affixes)

        if is_cognate_error(result):
            status = f" ({result.status})" if result.status else ""
            console.print(f"[red]Error{status}:[/red] {result.error}")
            raise SystemExit(1)

        session.record_search(result)
        chains = service.hydrate(result)

        if not chains:
            console.print(
                f"No {language_name(trg_lang)} cognates found for "
                f"{language_name(src_lang)} \"{result.params.word}\""
            )
        else:
            items, max_page = paginate(chains, page, settings.page_size)
            current = min(max(1, page), max_page)
            console.print(f"Total {len(chains)} results | Page {current} of {max_page}\n")
            for chain in items:
                console.print(render_chain(chain))

        console.print(f"\n[dim]?{to_query_string(result.params, page)}[/dim]")
        if show_query:
            console.print(result.query, markup=False, highlight=False)

    asyncio.run(_search())


@cli.command()
@click.argument('word')
@click.option('--src', 'src_lang', default='spa', help='Source language code')
@click.option('--trg', 'trg_lang', default='eng', help='Target language code')
@click.option('--affixes', is_flag=True, help='Allow prefixes and suffixes as cognates')
def query(word, src_lang, trg_lang, affixes):
    """Print the SPARQL query for WORD without running it."""
    params = SearchParams(
        word=word,
        src_lang=src_lang,
        trg_lang=trg_lang,
        allow_prefixes_and_suffixes=affixes,
    )
    try:
        built = build_sparql_query(params)
    except ValidationError as e:
        raise click.BadParameter(e.message, param_hint=e.field)
    click.echo(built.sparql)


@cli.command()
def resume():
    """Show the last recorded search."""
    settings = get_settings()
    session = SessionStore(settings.session_file)
    state = session.state

    if state.values is None or state.cognates is None:
        console.print('Run "search" to find cognates')
        return

    chains = hydrate(state.cognates, settings.include_identity_chains)
    values = state.values
    console.print(
        f"Last search: {language_name(values.src_lang)} \"{values.word}\" → "
        f"{language_name(values.trg_lang)}, {len(chains)} results"
    )
    for chain in chains[:settings.page_size]:
        console.print(render_chain(chain))


@cli.command()
@click.argument('word')
@click.option('--lang', 'lang_code', default='eng', help='Language of the entry')
def define(word, lang_code):
    """Print the definition of WORD from Wiktionary."""

    async def _define():
        settings = get_settings()
        async with WiktionaryClient(
            settings.wiktionary_rest_api,
            settings.wiktionary_action_api,
            timeout=settings.http_timeout,
        ) as client:
            html = await DefinitionService(client, settings).fetch_definition_html(word, lang_code)

        if not html:
            console.print(f"No {language_name(lang_code)} definition found for \"{word}\"")
            return

        for i, item in enumerate(BeautifulSoup(html, "lxml").select("ol > li"), 1):
            console.print(f"{i}. {item.get_text(' ', strip=True)}", markup=False)

    asyncio.run(_define())


@cli.command()
@click.argument('text')
def suggest(text):
    """Autocomplete TEXT against Wiktionary titles."""

    async def _suggest():
        settings = get_settings()
        async with WiktionaryClient(
            settings.wiktionary_rest_api,
            settings.wiktionary_action_api,
            timeout=settings.http_timeout,
        ) as client:
            options = await SuggestionService(client).suggest(text)
        for option in options or []:
            click.echo(option)

    asyncio.run(_suggest())


@cli.command()
def serve():
    """Run the HTTP API."""
    from cognate_finder.main import run
    run()


if __name__ == '__main__':
    cli()
