"""
TF-IDF bag-of-patterns matching.

Identifies which reference pattern (license text, boilerplate, ...) a snippet
most closely resembles, with a cosine similarity score.
"""

from pattern_bag.corpus import CorpusIndex, compute_idf, weigh_terms
from pattern_bag.matcher import sparse_dot, truncate_score
from pattern_bag.models import NO_MATCH, Match, Pattern, WeightedTerm
from pattern_bag.term_frequency import build_term_frequency, count_terms
from pattern_bag.tokenizer import HashTokenizer, hash_token, tokenize

__version__ = "0.1.0"

__all__ = [
    "CorpusIndex",
    "HashTokenizer",
    "Match",
    "NO_MATCH",
    "Pattern",
    "WeightedTerm",
    "build_term_frequency",
    "compute_idf",
    "count_terms",
    "hash_token",
    "sparse_dot",
    "tokenize",
    "truncate_score",
    "weigh_terms",
]
