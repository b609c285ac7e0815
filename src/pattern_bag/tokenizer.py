"""
Tokenizer adapter: turns raw text into a sequence of 64-bit token identifiers.

The matching code only needs token identity, so every lexical unit is mapped
to an opaque unsigned 64-bit hash. Hashes are derived with blake2b and are
stable across processes (unlike the builtin ``hash``).

Usage:
    from pattern_bag.tokenizer import HashTokenizer, tokenize

    tokenize("Copyright (c) 2020")          # default adapter
    HashTokenizer(stopwords=ENGLISH_STOPWORDS)("the quick brown fox")
"""

from __future__ import annotations

import hashlib
import re
from typing import Protocol

TOKEN_ID_BITS = 64

ENGLISH_STOPWORDS: frozenset[str] = frozenset([
    "a", "an", "and", "are", "as", "at", "be", "but", "by", "for", "if", "in",
    "into", "is", "it", "no", "not", "of", "on", "or", "such", "that", "the",
    "their", "then", "there", "these", "they", "this", "to", "was", "will", "with",
])

# Word runs, or a single punctuation character so rules like '=====' survive as
# repeated delimiter tokens.
_TOKEN_PATTERN = re.compile(r"\w+|[^\w\s]")


class Tokenizer(Protocol):
    """Anything that maps text to an ordered list of token ids."""

    def __call__(self, text: str | bytes) -> list[int]: ...


def hash_token(token: str) -> int:
    """Map a normalized token to an unsigned 64-bit identifier."""
    digest = hashlib.blake2b(token.encode("utf-8"), digest_size=TOKEN_ID_BITS // 8).digest()
    return int.from_bytes(digest, "little")


def split_words(text: str | bytes) -> list[str]:
    """Lowercase and split into word runs and single punctuation characters."""
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    return _TOKEN_PATTERN.findall(text.lower())


class HashTokenizer:
    """
    Configurable hashing tokenizer.

    Args:
        stopwords: Words dropped before hashing.
        min_length: Tokens shorter than this are dropped.
    """

    def __init__(self, stopwords: frozenset[str] = frozenset(), min_length: int = 1):
        self.stopwords = stopwords
        self.min_length = min_length

    def words(self, text: str | bytes) -> list[str]:
        return [
            word
            for word in split_words(text)
            if len(word) >= self.min_length and word not in self.stopwords
        ]

    def __call__(self, text: str | bytes) -> list[int]:
        return [hash_token(word) for word in self.words(text)]


_DEFAULT_TOKENIZER = HashTokenizer()


def tokenize(text: str | bytes) -> list[int]:
    """Tokenize with the default settings (no stopwords, every token kept)."""
    return _DEFAULT_TOKENIZER(text)


__all__ = [
    "ENGLISH_STOPWORDS",
    "HashTokenizer",
    "TOKEN_ID_BITS",
    "Tokenizer",
    "hash_token",
    "split_words",
    "tokenize",
]
