"""Lightweight request validation helpers."""

from typing import Any, Dict, List, Tuple, Optional

from ..models import TabMode


Rule = Tuple[str, type, Optional[int]]

MAX_QUERY_LENGTH = 500
MAX_URL_LENGTH = 4096
MAX_RECENT_TABS = 50


def validate_fields(payload: Dict[str, Any], rules: List[Rule]) -> Optional[str]:
    """
    Validate required fields with optional max length.

    Args:
        payload: Incoming JSON dict.
        rules: List of (field, type, max_length or None).

    Returns:
        None if valid, or error message string.
    """
    for field, expected_type, max_len in rules:
        if field not in payload:
            return f"Missing required field: {field}"
        value = payload.get(field)
        if not isinstance(value, expected_type) or (isinstance(value, bool) and expected_type is int):
            return f"Field '{field}' must be {expected_type.__name__}"
        if max_len is not None and len(str(value)) > max_len:
            return f"Field '{field}' exceeds max length {max_len}"
    return None


def validate_query(payload: Dict[str, Any]) -> Optional[str]:
    """An absent or null query is the empty query; anything else must be a string."""
    query = payload.get('query')
    if query is None:
        return None
    if not isinstance(query, str):
        return "Field 'query' must be str"
    if len(query) > MAX_QUERY_LENGTH:
        return f"Field 'query' exceeds max length {MAX_QUERY_LENGTH}"
    return None


def validate_mode(payload: Dict[str, Any]) -> Optional[str]:
    mode = payload.get('mode')
    if mode is None:
        return None
    try:
        TabMode(mode)
    except ValueError:
        return f"Invalid mode: {mode}"
    return None


def validate_optional_int(payload: Dict[str, Any], field: str) -> Optional[str]:
    value = payload.get(field)
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        return f"Field '{field}' must be int"
    return None
