"""
Corpus index: TF-IDF vectors for a fixed set of reference patterns.

The index is built once from (pattern id, text) pairs and is read-only
afterwards, so a single instance can serve queries from many threads.

Usage:
    from pattern_bag.corpus import CorpusIndex

    index = CorpusIndex([(1, "the quick brown fox"), (2, "the lazy dog")])
    best_id, score = index.best_for("quick fox")
    indices, scores = index.rank("quick fox", top_k=5)
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from types import MappingProxyType
from typing import TYPE_CHECKING, Hashable, Iterable, Mapping, Sequence

import numpy as np
from scipy.sparse import csr_matrix

from pattern_bag.matcher import batch_best_for, best_pattern, select_top_k
from pattern_bag.models import Match, Pattern, WeightedTerm
from pattern_bag.term_frequency import build_term_frequency
from pattern_bag.tokenizer import Tokenizer, tokenize

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)


# =============================================================================
# Corpus Statistics
# =============================================================================


def document_frequency(term_frequencies: Iterable[Mapping[int, int]]) -> Counter[int]:
    """Number of documents each token appears in."""
    return Counter(token for frequencies in term_frequencies for token in frequencies)


def compute_idf(dfs: Mapping[int, int], num_docs: int) -> dict[int, float]:
    """
    Inverse document frequency: idf(t) = ln(N / df(t)).

    Every token in dfs was observed at least once, so the ratio is >= 1 and the
    idf is >= 0; it is 0 exactly when the token occurs in every document.
    """
    idfs: dict[int, float] = {}
    for token, freq in dfs.items():
        idfs[token] = math.log(num_docs / freq)
    return idfs


def weigh_terms(
    frequencies: Mapping[int, int],
    idfs: Mapping[int, float],
) -> tuple[tuple[WeightedTerm, ...], float]:
    """
    Build a sorted TF-IDF vector and its Euclidean norm.

    Tokens without an idf entry are left out of the vector; the idf table is
    never modified.
    """
    terms = []
    for token, count in frequencies.items():
        idf = idfs.get(token)
        if idf is None:
            continue
        terms.append(WeightedTerm(token, count * idf))
    terms.sort()

    square_sum = 0.0
    for term in terms:
        square_sum += term.value * term.value
    return tuple(terms), math.sqrt(square_sum)


# =============================================================================
# Corpus Index
# =============================================================================


class CorpusIndex:
    """
    Immutable TF-IDF index over reference patterns.

    Args:
        patterns: (pattern id, text) pairs. Their order is the corpus order used
            to break ties between equally similar patterns. Pairs whose text is
            None are skipped.
        tokenizer: Callable mapping text to token ids.

    Raises:
        ValueError: A pattern id is None or occurs more than once.
        TypeError: A pattern text is neither str nor bytes.
    """

    def __init__(
        self,
        patterns: Iterable[tuple[Hashable, str | bytes | None]],
        tokenizer: Tokenizer = tokenize,
    ):
        self.tokenizer = tokenizer

        ids: list[Hashable] = []
        seen: set[Hashable] = set()
        term_frequencies: list[Counter[int]] = []
        for pattern_id, text in patterns:
            if text is None:
                logger.debug("Skipping pattern %r without text", pattern_id)
                continue
            if not isinstance(text, (str, bytes)):
                raise TypeError(
                    f"Pattern {pattern_id!r} text must be str or bytes, got {type(text).__name__}"
                )
            if pattern_id is None:
                raise ValueError("Pattern id None is reserved for 'no match'")
            if pattern_id in seen:
                raise ValueError(f"Duplicate pattern id: {pattern_id!r}")
            seen.add(pattern_id)
            ids.append(pattern_id)
            term_frequencies.append(build_term_frequency(text, tokenizer))

        dfs = document_frequency(term_frequencies)
        self._idfs = MappingProxyType(compute_idf(dfs, len(ids)))

        built = []
        for pattern_id, frequencies in zip(ids, term_frequencies):
            terms, square_sum = weigh_terms(frequencies, self._idfs)
            built.append(Pattern(pattern_id, terms, square_sum))
        self._patterns: tuple[Pattern, ...] = tuple(built)

        self._vocabulary = {token: column for column, token in enumerate(sorted(self._idfs))}
        self._weight_matrix = self._build_weight_matrix()
        self._norm_array = np.array([p.square_sum for p in self._patterns], dtype=np.float64)

        logger.debug(
            "Indexed %d patterns with %d distinct tokens", len(self._patterns), len(self._idfs)
        )

    @classmethod
    def from_mapping(
        cls,
        patterns: Mapping[Hashable, str | bytes | None],
        parse_ids: bool = False,
        tokenizer: Tokenizer = tokenize,
    ) -> "CorpusIndex":
        """
        Build an index from a pattern id -> text mapping.

        The mapping's iteration order becomes the corpus order. With parse_ids,
        string keys are parsed as base-10 integers.
        """
        if not parse_ids:
            return cls(patterns.items(), tokenizer=tokenizer)

        pairs = []
        for key, text in patterns.items():
            try:
                pattern_id = int(key, 10) if isinstance(key, (str, bytes)) else int(key)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Pattern key {key!r} is not an integer id") from e
            pairs.append((pattern_id, text))
        return cls(pairs, tokenizer=tokenizer)

    def _build_weight_matrix(self) -> csr_matrix:
        indptr = [0]
        indices: list[int] = []
        data: list[float] = []
        for pattern in self._patterns:
            for term in pattern.terms:
                indices.append(self._vocabulary[term.hash])
                data.append(term.value)
            indptr.append(len(indices))
        return csr_matrix(
            (
                np.array(data, dtype=np.float64),
                np.array(indices, dtype=np.int64),
                np.array(indptr, dtype=np.int64),
            ),
            shape=(len(self._patterns), len(self._vocabulary)),
        )

    def __len__(self) -> int:
        return len(self._patterns)

    @property
    def patterns(self) -> tuple[Pattern, ...]:
        return self._patterns

    @property
    def pattern_ids(self) -> list[Hashable]:
        return [p.pattern_id for p in self._patterns]

    @property
    def idfs(self) -> Mapping[int, float]:
        """Read-only idf table keyed by token id."""
        return self._idfs

    def idf(self, token: int) -> float | None:
        return self._idfs.get(token)

    def vectorize(self, text: str | bytes) -> tuple[tuple[WeightedTerm, ...], float]:
        """TF-IDF vector and norm of a text against the corpus idf table."""
        return weigh_terms(build_term_frequency(text, self.tokenizer), self._idfs)

    # =========================================================================
    # Queries
    # =========================================================================

    def best_for(self, snippet: str | bytes, decimals: int | None = None) -> Match:
        """
        Find the pattern most similar to a snippet.

        Returns:
            Match(pattern_id, score) where score is the cosine similarity
            truncated to `decimals` (Config.score_decimals by default).
            Match(None, 0.0) for an empty corpus, a snippet with no known
            vocabulary, or a snippet sharing no weighted token with any pattern.
        """
        query_terms, query_norm = self.vectorize(snippet)
        if query_norm == 0.0:
            logger.debug("Snippet has no weighted tokens in the corpus vocabulary")
        return best_pattern(query_terms, query_norm, self._patterns, decimals)

    def best_for_many(
        self,
        snippets: Sequence[str | bytes],
        num_workers: int | None = None,
    ) -> list[Match]:
        """best_for over a batch of snippets, results in input order."""
        return batch_best_for(snippets, self.best_for, num_workers=num_workers)

    def similarities(self, snippet: str | bytes) -> NDArray[np.float64]:
        """
        Untruncated cosine similarity of the snippet to every pattern.

        Patterns or queries with norm 0 get similarity 0.
        """
        scores = np.zeros(len(self._patterns), dtype=np.float64)
        query_terms, query_norm = self.vectorize(snippet)
        if query_norm == 0.0 or not self._patterns:
            return scores

        query = np.zeros(len(self._vocabulary), dtype=np.float64)
        for term in query_terms:
            query[self._vocabulary[term.hash]] = term.value
        dots = np.asarray(self._weight_matrix @ query).ravel()

        norms = self._norm_array * query_norm
        np.divide(dots, norms, out=scores, where=norms > 0)
        return scores

    def rank(
        self,
        snippet: str | bytes,
        top_k: int | None = None,
    ) -> tuple[NDArray[np.int64], NDArray[np.float64]]:
        """
        Rank patterns by cosine similarity to the snippet.

        Returns:
            (pattern indices, scores) in descending order of score; equal
            scores keep corpus order. Use pattern_ids to map indices to ids.
        """
        return select_top_k(self.similarities(snippet), top_k)


__all__ = [
    "CorpusIndex",
    "compute_idf",
    "document_frequency",
    "weigh_terms",
]
