"""Redaction helpers for request bodies and log events."""

from __future__ import annotations

import json
from typing import Any

_REDACTED = "***REDACTED***"
_SENSITIVE_KEY_FRAGMENTS = frozenset(
    {
        "token",
        "secret",
        "password",
        "authorization",
        "api_key",
    }
)


def _is_sensitive_key(key: str) -> bool:
    normalized = key.strip().lower()
    if not normalized:
        return False
    return any(fragment in normalized for fragment in _SENSITIVE_KEY_FRAGMENTS)


def redact_token(token: str) -> str:
    """Keep only enough of a token to correlate log lines: 03AFcW...9xQ -> 03AF***9xQ"""
    if not token:
        return ""
    if len(token) > 12:
        return token[:4] + "***" + token[-3:]
    return _REDACTED


def redact_mapping(value: Any) -> Any:
    """Return a copy of ``value`` with sensitive keys masked at any depth."""
    if isinstance(value, dict):
        sanitized: dict[str, Any] = {}
        for raw_key, raw_value in value.items():
            key = str(raw_key)
            if _is_sensitive_key(key) and not isinstance(raw_value, (dict, list)):
                sanitized[key] = (
                    redact_token(raw_value) if isinstance(raw_value, str) else _REDACTED
                )
                continue
            sanitized[key] = redact_mapping(raw_value)
        return sanitized

    if isinstance(value, list):
        return [redact_mapping(item) for item in value]

    return value


def redact_body(body: bytes) -> str:
    """Render a raw request body for logging.

    JSON bodies are parsed and masked key by key. Anything else is reduced
    to its size so opaque payloads never reach the logs verbatim.
    """
    if not body:
        return ""
    try:
        parsed = json.loads(body)
    except (UnicodeDecodeError, ValueError):
        return f"<{len(body)} bytes, not JSON>"
    return json.dumps(redact_mapping(parsed), ensure_ascii=False, separators=(",", ":"))
