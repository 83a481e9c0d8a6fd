"""Reconstruction of cognate chains from raw derivation edges.

The graph store hands back a flat, unordered bag of ``child -> parent``
edges. This module rebuilds the lineages they describe:

1. Index the edges both ways by ``(word, lang)`` identity.
2. Walk upward from the searched word, breadth-first, collecting every
   ancestor together with each simple path that reaches it.
3. From every ancestor walk downward, collecting each simple path that ends
   on a target-language word.
4. Cross the two path sets per ancestor and de-duplicate.

Paths never revisit a node, so cyclic or contradictory graph data simply
yields fewer chains. The transform is pure and never raises.
"""

from collections import deque
from typing import Iterable, Optional

from cognate_finder.core import CognateChain, CognateEdge, CognateRaw, WordRef
from cognate_finder.observ import get_logger
from cognate_finder.services.query import is_bound_morpheme

logger = get_logger(__name__)

NodeKey = tuple[str, str]
Path = tuple[NodeKey, ...]

# Upper bound on paths explored per walk; guards against combinatorial blowup
# on densely interlinked entries.
MAX_PATHS = 10_000


class DerivationGraph:
    """Bidirectional adjacency over derivation edges."""

    def __init__(self):
        # dict-of-dicts keeps first-seen order and collapses repeated edges
        self._parents: dict[NodeKey, dict[NodeKey, None]] = {}
        self._children: dict[NodeKey, dict[NodeKey, None]] = {}

    @classmethod
    def from_edges(cls, edges: Iterable[CognateEdge]) -> "DerivationGraph":
        graph = cls()
        for edge in edges:
            graph.add_edge(
                (edge.child_word, edge.child_lang),
                (edge.parent_word, edge.parent_lang),
            )
        return graph

    def add_edge(self, child: NodeKey, parent: NodeKey) -> None:
        if child == parent:
            return
        self._parents.setdefault(child, {})[parent] = None
        self._children.setdefault(parent, {})[child] = None

    def upward_paths(self, start: NodeKey) -> dict[NodeKey, list[Path]]:
        """Every ancestor of ``start`` (itself included) with the paths to it.

        Paths run ``start`` first. Ancestors are keyed in breadth-first
        discovery order.
        """
        found: dict[NodeKey, list[Path]] = {}
        for path in self._walk(start, self._parents):
            found.setdefault(path[-1], []).append(path)
        return found

    def downward_paths(
        self,
        start: NodeKey,
        lang: str,
        allow_affixes: bool = True,
    ) -> list[Path]:
        """Paths from ``start`` down to any word in ``lang``, ``start`` first."""
        return [
            path
            for path in self._walk(start, self._children)
            if path[-1][1] == lang
            and (allow_affixes or not is_bound_morpheme(path[-1][0]))
        ]

    def _walk(
        self,
        start: NodeKey,
        adjacency: dict[NodeKey, dict[NodeKey, None]],
    ) -> Iterable[Path]:
        queue: deque[Path] = deque([(start,)])
        emitted = 0
        while queue:
            path = queue.popleft()
            yield path
            emitted += 1
            if emitted >= MAX_PATHS:
                logger.warning("path_limit_reached", start=start, limit=MAX_PATHS)
                return
            for nxt in adjacency.get(path[-1], ()):
                if nxt in path:
                    continue  # cycle
                queue.append(path + (nxt,))


def _leg(path: Path, refs: dict[NodeKey, WordRef]) -> tuple[WordRef, ...]:
    """Turn an ancestor-first path into a chain side, ancestor excluded.

    A zero-length path (the ancestor is the word itself) restates the
    ancestor so the side is never empty. That restated element is the
    only repeat a chain may hold; the walk's cycle guard does not apply
    to it.
    """
    nodes = path[1:] or path
    return tuple(refs.setdefault(n, WordRef(word=n[0], lang_code=n[1])) for n in nodes)


def hydrate(
    raw: CognateRaw,
    include_identity_chains: bool = False,
) -> list[CognateChain]:
    """Rebuild ordered, de-duplicated cognate chains from a raw result.

    Args:
        raw: Edges returned for one search, with the search parameters
        include_identity_chains: Keep chains whose target is the searched
            word itself (only possible when source and target languages
            are the same)

    Returns:
        Chains grouped by ancestor in breadth-first order from the source
        word; empty when nothing connects the source to the target language.
    """
    params = raw.params
    source = params.source.key
    graph = DerivationGraph.from_edges(raw.edges)

    refs: dict[NodeKey, WordRef] = {}
    seen: set[tuple[NodeKey, Path, Path]] = set()
    chains: list[CognateChain] = []

    for ancestor, up_paths in graph.upward_paths(source).items():
        down_paths = graph.downward_paths(
            ancestor,
            params.trg_lang,
            allow_affixes=params.allow_prefixes_and_suffixes,
        )
        if not down_paths:
            continue

        for up in up_paths:
            src_path = tuple(reversed(up))
            for down in down_paths:
                if down[-1] == source and not include_identity_chains:
                    continue

                key = (ancestor, src_path, down)
                if key in seen:
                    continue
                seen.add(key)

                chains.append(CognateChain(
                    ancestor=refs.setdefault(
                        ancestor, WordRef(word=ancestor[0], lang_code=ancestor[1])
                    ),
                    src=_leg(src_path, refs),
                    trg=_leg(down, refs),
                ))

    logger.debug(
        "chains_hydrated",
        word=params.word,
        edges=len(raw.edges),
        chains=len(chains),
    )
    return chains


class HydrationCache:
    """Single-slot memo keyed by identity of the raw result.

    Hydrated chains are cheap to rebuild and never persisted; this only
    avoids recomputing them while the same ``CognateRaw`` object is current.
    """

    def __init__(self, include_identity_chains: bool = False):
        self._include_identity_chains = include_identity_chains
        self._raw: Optional[CognateRaw] = None
        self._chains: list[CognateChain] = []

    def __call__(self, raw: CognateRaw) -> list[CognateChain]:
        if raw is not self._raw:
            self._chains = hydrate(raw, self._include_identity_chains)
            self._raw = raw
        return self._chains
