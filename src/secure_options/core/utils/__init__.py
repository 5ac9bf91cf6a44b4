"""
Core utilities module for secure-options.
"""

# Datetime utilities
from .datetime_utils import utc_now, ensure_utc, format_iso

# Nested dictionary utilities
from .dict_utils import deep_merge, set_nested, normalize_key, find_key

__all__ = [
    # Datetime utilities
    'utc_now',
    'ensure_utc',
    'format_iso',
    # Dictionary utilities
    'deep_merge',
    'set_nested',
    'normalize_key',
    'find_key',
]
