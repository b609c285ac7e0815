"""
Tests for corpus statistics and pattern vectors.
"""

import math
from collections import Counter

import numpy as np
import pytest

from pattern_bag.corpus import CorpusIndex, compute_idf, document_frequency, weigh_terms
from pattern_bag.models import WeightedTerm
from pattern_bag.tokenizer import hash_token


@pytest.fixture
def index(int_tokenizer):
    return CorpusIndex(
        [
            ("a", "1 2 3 3 1"),
            ("b", "2 4"),
            ("c", "2 5 5 5 6 1"),
        ],
        tokenizer=int_tokenizer,
    )


class TestIdf:
    def test_compute_idf(self):
        idfs = compute_idf({1: 1, 2: 2, 3: 4}, 4)
        assert idfs[1] == pytest.approx(math.log(4))
        assert idfs[2] == pytest.approx(math.log(2))
        assert idfs[3] == 0.0

    def test_document_frequency_counts_documents(self):
        dfs = document_frequency([Counter({1: 5, 2: 1}), Counter({1: 1})])
        assert dfs == Counter({1: 2, 2: 1})

    def test_idf_non_negative_and_zero_iff_everywhere(self, index):
        for token, idf in index.idfs.items():
            assert idf >= 0.0
            in_all = all(token in {t.hash for t in p.terms} for p in index.patterns)
            assert (idf == 0.0) == in_all

    def test_every_corpus_token_has_an_entry(self, index):
        assert set(index.idfs) == {1, 2, 3, 4, 5, 6}

    def test_idf_values(self, index):
        assert index.idf(2) == 0.0
        assert index.idf(1) == pytest.approx(math.log(3 / 2))
        assert index.idf(4) == pytest.approx(math.log(3))
        assert index.idf(99) is None

    def test_idf_table_is_read_only(self, index):
        with pytest.raises(TypeError):
            index.idfs[99] = 1.0


class TestPatternVectors:
    def test_terms_strictly_increasing(self, index):
        for pattern in index.patterns:
            hashes = [term.hash for term in pattern.terms]
            assert all(a < b for a, b in zip(hashes, hashes[1:]))

    def test_square_sum_is_euclidean_norm(self, index):
        for pattern in index.patterns:
            expected = math.sqrt(sum(term.value**2 for term in pattern.terms))
            assert pattern.square_sum == pytest.approx(expected)

    def test_weight_is_count_times_idf(self, index):
        pattern_a = index.patterns[0]
        weights = dict(pattern_a.terms)
        # "1 2 3 3 1": the run of 3s collapses, the two separated 1s both count
        assert weights[1] == pytest.approx(2 * math.log(3 / 2))
        assert weights[3] == pytest.approx(math.log(3))
        assert weights[2] == 0.0

    def test_corpus_order_preserved(self, index):
        assert index.pattern_ids == ["a", "b", "c"]
        assert len(index) == 3

    def test_empty_pattern_has_zero_norm(self, int_tokenizer):
        index = CorpusIndex([(1, ""), (2, "7 8")], tokenizer=int_tokenizer)
        empty = index.patterns[0]
        assert empty.terms == ()
        assert empty.square_sum == 0.0
        assert len(empty) == 0

    def test_patterns_are_frozen(self, index):
        with pytest.raises(AttributeError):
            index.patterns[0].square_sum = 1.0


class TestWeighTerms:
    def test_unknown_tokens_are_dropped(self):
        idfs = {1: 0.5, 2: 2.0}
        terms, norm = weigh_terms(Counter({2: 3, 1: 1, 42: 7}), idfs)
        assert terms == (WeightedTerm(1, 0.5), WeightedTerm(2, 6.0))
        assert norm == pytest.approx(math.sqrt(0.25 + 36.0))
        assert 42 not in idfs

    def test_empty(self):
        assert weigh_terms(Counter(), {1: 1.0}) == ((), 0.0)

    def test_queries_do_not_grow_the_idf_table(self, index):
        before = dict(index.idfs)
        index.best_for("77 88 1")
        index.similarities("77 88 1")
        assert dict(index.idfs) == before


class TestConstruction:
    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            CorpusIndex([(1, "mit license"), (1, "gpl license")])

    def test_none_id_rejected(self):
        # None is the pattern id reported when nothing matches
        with pytest.raises(ValueError, match="None"):
            CorpusIndex([(None, "mit license text"), (2, "gpl license")])

    def test_none_key_rejected_in_mapping(self):
        with pytest.raises(ValueError):
            CorpusIndex.from_mapping({None: "mit license text", 2: "gpl license"})

    def test_non_text_rejected(self):
        with pytest.raises(TypeError):
            CorpusIndex([(1, 42)])

    def test_none_text_skipped(self):
        index = CorpusIndex([(1, None), (2, "mit license")])
        assert index.pattern_ids == [2]

    def test_bytes_text(self):
        index = CorpusIndex([(1, b"mit license"), (2, "gpl license")])
        assert index.idf(hash_token("mit")) == pytest.approx(math.log(2))

    def test_accepts_generator(self):
        index = CorpusIndex((i, f"token{i} shared") for i in range(3))
        assert index.pattern_ids == [0, 1, 2]
        assert index.idf(hash_token("shared")) == 0.0

    def test_from_mapping_keeps_iteration_order(self):
        index = CorpusIndex.from_mapping({"zlib": "zlib license", "apache": "apache license"})
        assert index.pattern_ids == ["zlib", "apache"]

    def test_from_mapping_parses_ids(self):
        index = CorpusIndex.from_mapping({"10": "zlib license", "2": "apache license"}, parse_ids=True)
        assert index.pattern_ids == [10, 2]

    def test_from_mapping_bad_key(self):
        with pytest.raises(ValueError, match="not an integer"):
            CorpusIndex.from_mapping({"gpl": "gnu general public license"}, parse_ids=True)

    def test_empty_corpus(self):
        index = CorpusIndex([])
        assert len(index) == 0
        assert dict(index.idfs) == {}
        assert np.array_equal(index.similarities("anything"), np.array([]))
