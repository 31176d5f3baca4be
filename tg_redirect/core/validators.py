"""
Input Validators and Sanitizers

This module provides validation and sanitization functions for user inputs.
Query parameters from ad clicks end up in stored attribution data and in
the shim page, so they are cleaned before use.

Security Considerations:
- Dangerous keys (event handlers, prototype names, script schemes) are dropped
- Keys are reduced to [A-Za-z0-9_-]
- Length limits bound what a single click can store
"""

import re
from typing import Mapping

from tg_redirect.core.types import UTMParams

UTM_KEYS = ("utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content")

MAX_PARAM_VALUE_LENGTH = 256
MAX_PARAM_KEY_LENGTH = 64
LOG_CODE_PREFIX_LENGTH = 20

DANGEROUS_PARAM_PATTERNS = [
    re.compile(r"^javascript:", re.IGNORECASE),
    re.compile(r"^data:", re.IGNORECASE),
    re.compile(r"^vbscript:", re.IGNORECASE),
    re.compile(r"on\w+$", re.IGNORECASE),
    re.compile(r"^__proto__$", re.IGNORECASE),
    re.compile(r"^constructor$", re.IGNORECASE),
    re.compile(r"^prototype$", re.IGNORECASE),
]

_UNSAFE_VALUE_CHARS = re.compile(r"[<>\"']")
_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def sanitize_param_value(value: str) -> str:
    """Truncate a value and strip characters usable for HTML injection."""
    return _UNSAFE_VALUE_CHARS.sub("", value[:MAX_PARAM_VALUE_LENGTH])


def sanitize_param_key(key: str) -> str:
    """Truncate a key and keep only [A-Za-z0-9_-]."""
    return _UNSAFE_KEY_CHARS.sub("", key[:MAX_PARAM_KEY_LENGTH])


def is_dangerous_param(key: str) -> bool:
    """Return True if a query parameter key should never be stored."""
    return any(pattern.search(key) for pattern in DANGEROUS_PARAM_PATTERNS)


def extract_utm_params(query: Mapping[str, str]) -> UTMParams:
    """
    Extract the five standard UTM parameters from a query mapping.

    Empty and non-string values are ignored.
    """
    values = {}
    for key in UTM_KEYS:
        value = query.get(key)
        if isinstance(value, str) and value:
            values[key] = sanitize_param_value(value)
    return UTMParams(**values)


def extract_extra_params(query: Mapping[str, str]) -> dict[str, str]:
    """
    Extract non-UTM query parameters, dropping dangerous keys.

    Returns:
        Sanitized key/value pairs, disjoint from the UTM keys
    """
    extra: dict[str, str] = {}
    for key, value in query.items():
        if key in UTM_KEYS or not isinstance(value, str) or not value:
            continue
        if is_dangerous_param(key):
            continue
        clean_key = sanitize_param_key(key)
        if not clean_key or clean_key in UTM_KEYS:
            continue
        extra[clean_key] = sanitize_param_value(value)
    return extra


def sanitize_code_for_log(code: str) -> str:
    """Shorten untrusted code input before it is written to logs."""
    if not isinstance(code, str):
        return ""
    return code[:LOG_CODE_PREFIX_LENGTH]
