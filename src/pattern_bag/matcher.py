"""
Similarity primitives over sorted sparse TF-IDF vectors.

Vectors are sequences of WeightedTerm sorted ascending by token id, so the dot
product is a single merge-join pass instead of a cross product.

Usage:
    from pattern_bag.matcher import sparse_dot, pattern_similarity, truncate_score
"""

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Callable, Sequence

import numpy as np

from pattern_bag.config import Config
from pattern_bag.models import NO_MATCH, Match, Pattern, WeightedTerm

if TYPE_CHECKING:
    from numpy.typing import NDArray


# =============================================================================
# Sparse Dot Products
# =============================================================================


def sparse_dot(left: Sequence[WeightedTerm], right: Sequence[WeightedTerm]) -> float:
    """
    Dot product of two sorted sparse vectors in O(len(left) + len(right)).

    Advances whichever cursor points at the smaller token id and accumulates
    the product of the weights when both point at the same id.
    """
    total = 0.0
    i = j = 0
    n, m = len(left), len(right)
    while i < n and j < m:
        a = left[i]
        b = right[j]
        if a.hash == b.hash:
            total += a.value * b.value
            i += 1
            j += 1
        elif a.hash > b.hash:
            j += 1
        else:
            i += 1
    return total


def sparse_dot_naive(left: Sequence[WeightedTerm], right: Sequence[WeightedTerm]) -> float:
    """Cross-product dot product; O(len(left) * len(right)), for verification."""
    total = 0.0
    for a in left:
        for b in right:
            if a.hash == b.hash:
                total += a.value * b.value
    return total


# =============================================================================
# Scoring
# =============================================================================


def pattern_similarity(query_terms: Sequence[WeightedTerm], pattern: Pattern) -> float:
    """
    Dot product normalized by the pattern norm only.

    The query norm is applied once to the winning similarity, see
    CorpusIndex.best_for. A pattern with norm 0 scores 0.
    """
    if pattern.square_sum == 0.0:
        return 0.0
    return sparse_dot(pattern.terms, query_terms) / pattern.square_sum


def truncate_score(value: float, decimals: int | None = None) -> float:
    """Truncate toward zero to a fixed number of decimals: 0.123456 -> 0.1234."""
    if decimals is None:
        decimals = Config.score_decimals
    scale = 10**decimals
    return math.trunc(value * scale) / scale


def best_pattern(
    query_terms: Sequence[WeightedTerm],
    query_norm: float,
    patterns: Sequence[Pattern],
    decimals: int | None = None,
) -> Match:
    """
    Pick the pattern with the highest similarity to a query vector.

    Ties keep the pattern seen first. A zero query norm or the absence of any
    positive similarity yields NO_MATCH.
    """
    if query_norm == 0.0 or not patterns:
        return NO_MATCH

    best_id = None
    best_match = 0.0
    for pattern in patterns:
        match = pattern_similarity(query_terms, pattern)
        if match > best_match:
            best_match = match
            best_id = pattern.pattern_id

    if best_id is None:
        return NO_MATCH
    if decimals is None:
        decimals = Config.score_decimals
    scale = 10**decimals
    return Match(best_id, math.trunc(best_match * scale / query_norm) / scale)


# =============================================================================
# Ranking Helpers
# =============================================================================


def select_top_k(
    scores: NDArray[np.float64],
    top_k: int | None,
) -> tuple[NDArray[np.int64], NDArray[np.float64]]:
    """
    Order scores descending, keeping corpus order among equal scores.

    Args:
        scores: Score array for all patterns (N,)
        top_k: Number of top results (None for all)

    Returns:
        (sorted_indices, sorted_scores) in descending order
    """
    order = np.argsort(-scores, kind="stable").astype(np.int64)
    if top_k is not None:
        order = order[: max(top_k, 0)]
    return order, scores[order]


def batch_best_for(
    snippets: Sequence[str | bytes],
    best_for: Callable[[str | bytes], Match],
    num_workers: int | None = None,
    min_queries_for_parallel: int | None = None,
) -> list[Match]:
    """
    Run best_for over many snippets, in parallel for larger batches.

    Results keep the order of the input snippets.
    """
    if not snippets:
        return []
    if num_workers is None:
        num_workers = Config.num_workers
    if min_queries_for_parallel is None:
        min_queries_for_parallel = Config.min_queries_for_parallel

    # For small batches, run sequentially
    if len(snippets) < min_queries_for_parallel or num_workers <= 1:
        return [best_for(snippet) for snippet in snippets]

    with ThreadPoolExecutor(max_workers=num_workers) as executor:
        return list(executor.map(best_for, snippets))


__all__ = [
    "batch_best_for",
    "best_pattern",
    "pattern_similarity",
    "select_top_k",
    "sparse_dot",
    "sparse_dot_naive",
    "truncate_score",
]
