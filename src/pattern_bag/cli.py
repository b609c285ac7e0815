"""
Classify snippet files against a set of reference patterns.

Usage:
    pattern-bag patterns.json snippet.txt [snippet2.txt ...] [--top-k 5] [--json]
    pattern-bag licenses/ snippet.txt --numeric-ids --verbose

PATTERNS is either a JSON object mapping pattern ids to pattern texts, or a
directory of text files whose file stems are the pattern ids.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pattern_bag.config import Config
from pattern_bag.corpus import CorpusIndex
from pattern_bag.tokenizer import ENGLISH_STOPWORDS, HashTokenizer

logger = logging.getLogger(__name__)


def load_patterns(path: Path) -> dict[str, str | bytes]:
    """
    Read pattern texts from a JSON object file or a directory of text files.

    Directory entries are read in sorted file name order; two files sharing a
    stem raise ValueError.
    """
    if path.is_dir():
        patterns: dict[str, str | bytes] = {}
        for f in sorted(path.iterdir()):
            if not f.is_file():
                continue
            if f.stem in patterns:
                raise ValueError(f"{path}: duplicate pattern id {f.stem!r}")
            patterns[f.stem] = f.read_bytes()
        return patterns

    with open(path) as fp:
        data = json.load(fp)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object of pattern id -> text")
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pattern-bag",
        description="Find the reference pattern most similar to each snippet",
    )
    parser.add_argument("patterns", type=Path, help="JSON file or directory of pattern texts")
    parser.add_argument("snippets", type=Path, nargs="+", help="Snippet files to classify")
    parser.add_argument("--top-k", type=int, help="Show the K most similar patterns per snippet")
    parser.add_argument("--numeric-ids", action="store_true", help="Parse pattern ids as integers")
    parser.add_argument("--stopwords", action="store_true", help="Drop English stopwords")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")
    return parser


def resolve_log_level(name: str) -> int:
    """Numeric logging level for a level name; unknown names fall back to WARNING."""
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.WARNING


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else resolve_log_level(Config.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.patterns.exists():
        print(f"Error: Patterns not found: {args.patterns}", file=sys.stderr)
        sys.exit(1)
    for snippet_path in args.snippets:
        if not snippet_path.is_file():
            print(f"Error: Snippet file not found: {snippet_path}", file=sys.stderr)
            sys.exit(1)

    tokenizer = HashTokenizer(stopwords=ENGLISH_STOPWORDS) if args.stopwords else HashTokenizer()
    try:
        patterns = load_patterns(args.patterns)
        index = CorpusIndex.from_mapping(patterns, parse_ids=args.numeric_ids, tokenizer=tokenizer)
    except (OSError, ValueError, TypeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    logger.info("Loaded %d patterns from %s", len(index), args.patterns)

    ids = index.pattern_ids
    results = []
    for snippet_path in args.snippets:
        snippet = snippet_path.read_bytes()
        if args.top_k is not None:
            order, scores = index.rank(snippet, top_k=args.top_k)
            results.append({
                "snippet": str(snippet_path),
                "matches": [
                    {"pattern_id": ids[idx], "score": float(score)}
                    for idx, score in zip(order.tolist(), scores.tolist())
                ],
            })
        else:
            best_id, score = index.best_for(snippet)
            results.append({"snippet": str(snippet_path), "pattern_id": best_id, "score": score})

    if args.json:
        print(json.dumps(results, indent=2))
        return

    for result in results:
        if "matches" in result:
            for rank, match in enumerate(result["matches"], start=1):
                print(f"{result['snippet']}\t{rank}\t{match['pattern_id']}\t{match['score']:.6f}")
        else:
            pattern_id = "-" if result["pattern_id"] is None else result["pattern_id"]
            print(f"{result['snippet']}\t{pattern_id}\t{result['score']:.{Config.score_decimals}f}")


if __name__ == "__main__":
    main()
