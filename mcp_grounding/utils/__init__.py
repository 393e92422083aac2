"""Utility functions and helpers."""

from .async_utils import retry_with_backoff
from .validation import (
    validate_min_score,
    validate_query_args,
    validate_search_query,
    validate_source_paths,
    validate_top_k,
)

__all__ = [
    "retry_with_backoff",
    "validate_min_score",
    "validate_query_args",
    "validate_search_query",
    "validate_source_paths",
    "validate_top_k",
]
