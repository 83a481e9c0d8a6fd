"""Tests for cognate chain reconstruction.

Chains are pure functions of the edge set, so these tests build edge sets
by hand and check the lineages that come out.
"""

from cognate_finder.core import CognateChain, WordRef
from cognate_finder.services.hydrate import DerivationGraph, HydrationCache, hydrate

from conftest import edge, raw_for


def ref(word: str, lang: str) -> WordRef:
    return WordRef(word=word, lang_code=lang)


def assert_well_formed(chains: list[CognateChain]) -> None:
    triples = set()
    for chain in chains:
        assert chain.src and chain.trg
        for side in (chain.src, chain.trg):
            path = [chain.ancestor, *side]
            if len(side) == 1 and side[0] == chain.ancestor:
                continue  # ancestor restated as the word itself
            assert len({r.key for r in path}) == len(path)
        triples.add((chain.ancestor, chain.src, chain.trg))
    assert len(triples) == len(chains)


# (dedo, spa) <- (digitus, lat) <- (*deyḱ-, ine-pro) -> (*taikną, gem-pro) -> (token, eng)
#                (digitus, lat) -> (digit, eng)
PIE_EDGES = [
    edge("dedo", "spa", "digitus", "lat"),
    edge("digit", "eng", "digitus", "lat"),
    edge("digitus", "lat", "*deyḱ-", "ine-pro"),
    edge("*taikną", "gem-pro", "*deyḱ-", "ine-pro"),
    edge("token", "eng", "*taikną", "gem-pro"),
]


class TestHydrate:
    """Chain reconstruction from raw edges."""

    def test_single_shared_ancestor(self):
        raw = raw_for([
            edge("dedo", "spa", "digitus", "lat"),
            edge("digit", "eng", "digitus", "lat"),
        ])

        chains = hydrate(raw)

        assert chains == [
            CognateChain(
                ancestor=ref("digitus", "lat"),
                src=(ref("dedo", "spa"),),
                trg=(ref("digit", "eng"),),
            )
        ]

    def test_no_path_to_target_language(self):
        raw = raw_for([
            edge("dedo", "spa", "digitus", "lat"),
            edge("doigt", "fra", "digitus", "lat"),
        ])
        assert hydrate(raw) == []

    def test_disconnected_edges(self):
        raw = raw_for([edge("digit", "eng", "digitus", "lat")])
        assert hydrate(raw) == []

    def test_empty_edges(self):
        assert hydrate(raw_for([])) == []

    def test_ancestors_in_breadth_first_order(self):
        chains = hydrate(raw_for(PIE_EDGES))

        assert [(c.ancestor.word, [r.word for r in c.src], [r.word for r in c.trg]) for c in chains] == [
            ("digitus", ["dedo"], ["digit"]),
            ("*deyḱ-", ["digitus", "dedo"], ["digitus", "digit"]),
            ("*deyḱ-", ["digitus", "dedo"], ["*taikną", "token"]),
        ]
        assert_well_formed(chains)

    def test_deterministic(self):
        assert hydrate(raw_for(PIE_EDGES)) == hydrate(raw_for(PIE_EDGES))

    def test_duplicate_paths_collapse(self):
        raw = raw_for([
            edge("dedo", "spa", "digitus", "lat"),
            edge("digit", "eng", "digitus", "lat"),
            edge("dedo", "spa", "digitus", "lat"),
            edge("digit", "eng", "digitus", "lat"),
        ])
        assert len(hydrate(raw)) == 1

    def test_cycles_do_not_repeat_nodes(self):
        raw = raw_for([
            edge("dedo", "spa", "digitus", "lat"),
            edge("digitus", "lat", "dedo", "spa"),
            edge("digit", "eng", "digitus", "lat"),
            edge("digitus", "lat", "digit", "eng"),
        ])

        chains = hydrate(raw)

        assert chains
        assert_well_formed(chains)

    def test_self_loop_ignored(self):
        raw = raw_for([
            edge("dedo", "spa", "dedo", "spa"),
            edge("dedo", "spa", "digitus", "lat"),
            edge("digit", "eng", "digitus", "lat"),
        ])
        assert len(hydrate(raw)) == 1

    def test_source_word_as_ancestor(self):
        raw = raw_for(
            [edge("digit", "eng", "digitus", "lat")],
            word="digitus",
            src_lang="lat",
        )

        chains = hydrate(raw)

        assert chains == [
            CognateChain(
                ancestor=ref("digitus", "lat"),
                src=(ref("digitus", "lat"),),
                trg=(ref("digit", "eng"),),
            )
        ]

    def test_ancestor_in_target_language(self):
        raw = raw_for(
            [edge("dedo", "spa", "digitus", "lat")],
            trg_lang="lat",
        )

        chains = hydrate(raw)

        assert chains == [
            CognateChain(
                ancestor=ref("digitus", "lat"),
                src=(ref("dedo", "spa"),),
                trg=(ref("digitus", "lat"),),
            )
        ]

    def test_source_word_is_trimmed(self):
        raw = raw_for(
            [
                edge("dedo", "spa", "digitus", "lat"),
                edge("digit", "eng", "digitus", "lat"),
            ],
            word="  dedo ",
        )
        assert len(hydrate(raw)) == 1


class TestAffixes:
    """Bound morphemes as chain termini."""

    EDGES = [
        edge("dedo", "spa", "digitus", "lat"),
        edge("digit", "eng", "digitus", "lat"),
        edge("digiti-", "eng", "digitus", "lat"),
    ]

    def test_excluded_when_disallowed(self):
        chains = hydrate(raw_for(self.EDGES, allow_prefixes_and_suffixes=False))
        assert [c.target.word for c in chains] == ["digit"]

    def test_included_when_allowed(self):
        chains = hydrate(raw_for(self.EDGES, allow_prefixes_and_suffixes=True))
        assert [c.target.word for c in chains] == ["digit", "digiti-"]

    def test_affix_may_be_intermediate(self):
        raw = raw_for([
            edge("dedo", "spa", "digitus", "lat"),
            edge("digiti-", "lat", "digitus", "lat"),
            edge("digitigrade", "eng", "digiti-", "lat"),
        ])
        chains = hydrate(raw)
        assert [[r.word for r in c.trg] for c in chains] == [["digiti-", "digitigrade"]]


class TestIdentityChains:
    """Source and target language are the same."""

    EDGES = [
        edge("dedo", "spa", "digitus", "lat"),
        edge("dedal", "spa", "digitus", "lat"),
    ]

    def test_dropped_by_default(self):
        chains = hydrate(raw_for(self.EDGES, trg_lang="spa"))
        assert [(c.ancestor.word, c.target.word) for c in chains] == [("digitus", "dedal")]

    def test_kept_when_enabled(self):
        chains = hydrate(raw_for(self.EDGES, trg_lang="spa"), include_identity_chains=True)
        assert [(c.ancestor.word, c.target.word) for c in chains] == [
            ("dedo", "dedo"),
            ("digitus", "dedo"),
            ("digitus", "dedal"),
        ]


class TestDerivationGraph:

    def setup_method(self):
        self.graph = DerivationGraph.from_edges(PIE_EDGES)

    def test_upward_paths_start_with_source(self):
        found = self.graph.upward_paths(("dedo", "spa"))

        assert list(found) == [("dedo", "spa"), ("digitus", "lat"), ("*deyḱ-", "ine-pro")]
        assert found[("*deyḱ-", "ine-pro")] == [
            (("dedo", "spa"), ("digitus", "lat"), ("*deyḱ-", "ine-pro")),
        ]

    def test_downward_paths_filter_language(self):
        paths = self.graph.downward_paths(("*deyḱ-", "ine-pro"), "eng")

        assert [p[-1] for p in paths] == [("digit", "eng"), ("token", "eng")]


class TestHydrationCache:

    def test_memoizes_by_identity(self):
        cache = HydrationCache()
        raw = raw_for(PIE_EDGES)

        first = cache(raw)
        assert cache(raw) is first

        equal_copy = raw.model_copy()
        assert cache(equal_copy) is not first
        assert cache(equal_copy) == first
