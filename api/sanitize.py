"""
Input sanitization for request bodies
Trims strings, escapes HTML and drops empty array items before validation
"""

from typing import Any

_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
    ("/", "&#x2F;"),
)


def sanitize_string(value: str, escape: bool = True) -> str:
    value = value.strip()
    if escape:
        # & first so existing entities are escaped once
        for char, entity in _HTML_ESCAPES:
            value = value.replace(char, entity)
    return value


def sanitize_value(value: Any, escape: bool = True) -> Any:
    """Recursively sanitize a decoded JSON value"""
    if isinstance(value, str):
        return sanitize_string(value, escape)

    if isinstance(value, list):
        return [
            sanitize_value(item, escape)
            for item in value
            if item is not None and item != ""
        ]

    if isinstance(value, dict):
        return {key: sanitize_value(item, escape) for key, item in value.items()}

    return value
