"""
Helpers for nested configuration dictionaries.
"""

from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, cast


def deep_merge(base: Dict[str, Any], update: Mapping[str, Any]) -> Dict[str, Any]:
    """Deep merge of dictionaries, in place on ``base``."""
    for key, value in update.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, Mapping):
            deep_merge(cast(Dict[str, Any], base[key]), value)
        elif isinstance(value, Mapping):
            base[key] = deep_merge({}, value)
        else:
            base[key] = value
    return base


def set_nested(data: Dict[str, Any], path: Tuple[str, ...], value: Any) -> None:
    """Set value at nested path, creating intermediate dictionaries."""
    current = data
    for key in path[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]
    current[path[-1]] = value


def normalize_key(key: str) -> str:
    """
    Normalize a configuration key for matching.

    Matching is case-insensitive and ignores '_' and '-', so
    ``ConnectionString``, ``connection_string`` and ``connection-string``
    all address the same field.
    """
    return key.replace("_", "").replace("-", "").lower()


def find_key(data: Mapping[str, Any], wanted: Iterable[str]) -> Optional[str]:
    """Return the first key of ``data`` matching any of ``wanted`` after normalization."""
    targets = {normalize_key(w) for w in wanted}
    for key in data:
        if normalize_key(str(key)) in targets:
            return key
    return None
