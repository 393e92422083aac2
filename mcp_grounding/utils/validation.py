"""Validation of query and ingestion arguments."""

from typing import Iterable, List, Optional

from ..core.exceptions import ValidationError

MAX_QUERY_LENGTH = 10000


def validate_search_query(query: str) -> None:
    """Validate search query."""
    if not isinstance(query, str):
        raise ValidationError("Search query must be a string", "query")

    if not query.strip():
        raise ValidationError("Search query cannot be empty", "query")

    if len(query) > MAX_QUERY_LENGTH:
        raise ValidationError(f"Search query too long (max {MAX_QUERY_LENGTH} characters)", "query")


def validate_top_k(top_k: Optional[int]) -> None:
    """Validate the number of requested results."""
    if top_k is None:
        return

    if isinstance(top_k, bool) or not isinstance(top_k, int):
        raise ValidationError("top_k must be an integer", "top_k")

    if top_k < 1:
        raise ValidationError("top_k must be positive", "top_k")

    if top_k > 1000:
        raise ValidationError("top_k too large (max 1000)", "top_k")


def validate_min_score(min_score: Optional[float]) -> None:
    """Validate the similarity threshold."""
    if min_score is None:
        return

    if isinstance(min_score, bool) or not isinstance(min_score, (int, float)):
        raise ValidationError("min_score must be a number", "min_score")

    if not (-1.0 <= min_score <= 1.0):
        raise ValidationError("min_score must be between -1.0 and 1.0", "min_score")


def validate_source_paths(source_paths: Iterable[str]) -> List[str]:
    """Validate and normalize a list of source paths."""
    if isinstance(source_paths, str):
        raise ValidationError("Source paths must be a list, not a single string", "source_paths")

    paths = []
    for path in source_paths:
        if not isinstance(path, str) or not path.strip():
            raise ValidationError("Source paths must be non-empty strings", "source_paths")
        paths.append(path.strip())
    return paths


def validate_query_args(query: str, top_k: Optional[int], min_score: Optional[float]) -> None:
    """Validate all arguments of a similarity query."""
    validate_search_query(query)
    validate_top_k(top_k)
    validate_min_score(min_score)
