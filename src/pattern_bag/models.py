from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, NamedTuple


class WeightedTerm(NamedTuple):
    """A token id and its TF-IDF weight (term count * idf)."""

    hash: int
    value: float


@dataclass(frozen=True)
class Pattern:
    """
    A reference pattern in vector form.

    Attributes:
        pattern_id: Caller-supplied identifier.
        terms: Weighted terms, strictly increasing by token id.
        square_sum: Euclidean norm of the weights, sqrt(sum(value ** 2)).
    """

    pattern_id: Hashable
    terms: tuple[WeightedTerm, ...]
    square_sum: float

    def __len__(self) -> int:
        return len(self.terms)


class Match(NamedTuple):
    """Best pattern for a snippet; pattern_id is None when nothing matched."""

    pattern_id: Hashable | None
    score: float


NO_MATCH = Match(None, 0.0)
