"""
Runtime defaults for pattern matching.

Values can be overridden through environment variables:
    PATTERN_BAG_SCORE_DECIMALS=4            # Digits kept when truncating scores
    PATTERN_BAG_NUM_WORKERS=32              # Threads for batch queries
    PATTERN_BAG_MIN_QUERIES_FOR_PARALLEL=10 # Smaller batches run sequentially
    PATTERN_BAG_LOG_LEVEL=WARNING           # Logging level used by the CLI
"""

import os

DEFAULT_SCORE_DECIMALS = int(os.environ.get("PATTERN_BAG_SCORE_DECIMALS", "4"))
DEFAULT_NUM_WORKERS = int(os.environ.get("PATTERN_BAG_NUM_WORKERS", "32"))
MIN_QUERIES_FOR_PARALLEL = int(os.environ.get("PATTERN_BAG_MIN_QUERIES_FOR_PARALLEL", "10"))
DEFAULT_LOG_LEVEL = os.environ.get("PATTERN_BAG_LOG_LEVEL", "WARNING")


class Config:
    """Global matching configuration."""

    score_decimals: int = DEFAULT_SCORE_DECIMALS
    num_workers: int = DEFAULT_NUM_WORKERS
    min_queries_for_parallel: int = MIN_QUERIES_FOR_PARALLEL
    log_level: str = DEFAULT_LOG_LEVEL
