from collections import Counter
from typing import Iterable

from pattern_bag.tokenizer import Tokenizer, tokenize


def count_terms(tokens: Iterable[int]) -> Counter[int]:
    """
    Count token occurrences, collapsing runs of the same token.

    A token equal to the one right before it is skipped, so a run like '====='
    counts once. A token that reappears after a different token is counted
    again: [A, A, A, B, A] -> {A: 2, B: 1}.
    """
    counts: Counter[int] = Counter()
    previous = None
    for token in tokens:
        if token == previous:
            continue
        previous = token
        counts[token] += 1
    return counts


def build_term_frequency(text: str | bytes, tokenizer: Tokenizer = tokenize) -> Counter[int]:
    """Term frequency of a single document."""
    return count_terms(tokenizer(text))
