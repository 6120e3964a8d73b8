#!/usr/bin/env python3
"""
Reversible flattening of nested documents into flat key -> value maps.

Path segments are joined with a NUL byte so that real keys containing
'/', '.' or '-' never collide with the separator:

    {"user": {"greeting": "Hello", "tags": ["a", "b"]}}

    {"user\\x00greeting": "Hello",
     "user\\x00tags\\x000": "a",
     "user\\x00tags\\x001": "b"}

Object keys made only of digits are tagged with a leading \\x02 before
flattening, so unflatten() can tell {"0": ...} apart from a list index.
Empty dicts and lists are kept as leaf values.
"""

import re
from typing import Any

DELIMITER = '\x00'
NUMERIC_KEY_TAG = '\x02'

_INDEX_RE = re.compile(r'^[0-9]+$')


def _is_index(segment: str) -> bool:
    return bool(_INDEX_RE.match(segment))


def tag_numeric_keys(obj: Any) -> Any:
    """Prefix digit-only dict keys with NUMERIC_KEY_TAG (recursively)."""
    if isinstance(obj, dict):
        return {
            (NUMERIC_KEY_TAG + key if _is_index(str(key)) else str(key)): tag_numeric_keys(value)
            for key, value in obj.items()
        }
    if isinstance(obj, list):
        return [tag_numeric_keys(item) for item in obj]
    return obj


def untag_numeric_keys(obj: Any) -> Any:
    """Inverse of tag_numeric_keys()."""
    if isinstance(obj, dict):
        return {
            (key[1:] if key.startswith(NUMERIC_KEY_TAG) else key): untag_numeric_keys(value)
            for key, value in obj.items()
        }
    if isinstance(obj, list):
        return [untag_numeric_keys(item) for item in obj]
    return obj


def flatten(obj: Any, delimiter: str = DELIMITER) -> dict[str, Any]:
    """
    Flatten nested dicts/lists into a single-level dict.

    Args:
        obj: Root object (dict or list)
        delimiter: Path segment separator

    Returns:
        Ordered flat map of path -> leaf value
    """
    result: dict[str, Any] = {}

    def _walk(value: Any, prefix: str) -> None:
        if isinstance(value, dict) and value:
            for key, child in value.items():
                _walk(child, f"{prefix}{delimiter}{key}")
        elif isinstance(value, list) and value:
            for i, child in enumerate(value):
                _walk(child, f"{prefix}{delimiter}{i}")
        else:
            result[prefix] = value

    if isinstance(obj, dict):
        for key, value in obj.items():
            _walk(value, str(key))
    elif isinstance(obj, list):
        for i, value in enumerate(obj):
            _walk(value, str(i))
    return result


def _new_container(next_segment: str) -> Any:
    return [] if _is_index(next_segment) else {}


def _descend(node: Any, segment: str, next_segment: str) -> Any:
    """Return the child container at segment, creating it if needed."""
    if isinstance(node, list):
        idx = int(segment)
        while len(node) <= idx:
            node.append(None)
        if not isinstance(node[idx], (dict, list)):
            node[idx] = _new_container(next_segment)
        return node[idx]

    child = node.get(segment)
    if not isinstance(child, (dict, list)):
        child = _new_container(next_segment)
        node[segment] = child
    return child


def _assign(node: Any, segment: str, value: Any) -> None:
    if isinstance(node, list):
        idx = int(segment)
        while len(node) <= idx:
            node.append(None)
        node[idx] = value
    else:
        node[segment] = value


def unflatten(flat_map: dict[str, Any], delimiter: str = DELIMITER) -> dict[str, Any]:
    """
    Rebuild a nested dict from a flat map produced by flatten().

    Digit-only segments become list indices; everything else becomes a
    dict key. Tagged numeric keys stay tagged here (see unflatten_document).
    """
    root: dict[str, Any] = {}
    for key, value in flat_map.items():
        parts = key.split(delimiter)
        node: Any = root
        for i, part in enumerate(parts[:-1]):
            node = _descend(node, part, parts[i + 1])
        _assign(node, parts[-1], value)
    return root


def flatten_document(obj: Any) -> dict[str, Any]:
    """Tag numeric keys, then flatten with the private delimiter."""
    return flatten(tag_numeric_keys(obj))


def unflatten_document(flat_map: dict[str, Any]) -> dict[str, Any]:
    """Unflatten with the private delimiter, then restore numeric keys."""
    return untag_numeric_keys(unflatten(flat_map))


def display_key(key: str) -> str:
    """Human-readable form of a flat key: 'user/tags/0'."""
    return key.replace(NUMERIC_KEY_TAG, '').replace(DELIMITER, '/')
