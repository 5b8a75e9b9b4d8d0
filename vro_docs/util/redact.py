"""Utilities for redacting sensitive data from strings."""

import re

# Patterns for sensitive data that should be redacted
SENSITIVE_PATTERNS = [
    # JSON bodies: "password": "...", "refresh_token": "...", "token": "..."
    (
        r'"(password|refresh_token|refreshToken|access_token|token)"\s*:\s*"[^"]*"',
        r'"\1": "REDACTED"',
    ),
    # Bearer tokens
    (r"Bearer\s+\S+", "Bearer REDACTED"),
    # key=value pairs
    (r"(api[_-]?key|token|secret|password)=\S+", r"\1=REDACTED"),
]


def redact_sensitive(text: str) -> str:
    """
    Redact sensitive data from text using pattern matching.

    Args:
        text: Text potentially containing sensitive data

    Returns:
        Text with sensitive data replaced with REDACTED markers

    Example:
        >>> redact_sensitive('{"refresh_token": "abc123"}')
        '{"refresh_token": "REDACTED"}'
    """
    result = text
    for pattern, replacement in SENSITIVE_PATTERNS:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE)
    return result
