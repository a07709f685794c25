# app/utils/__init__.py
"""
Utility functions package.

- general.py: General-purpose helpers (result handling, timestamps, payload parsing)
"""

# Import commonly used utilities for convenient access
from .general import utcnow, to_naive_utc, get_json_body
from .general import _handle_service_result

__all__ = [
    'utcnow',
    'to_naive_utc',
    'get_json_body',
    '_handle_service_result',
]
