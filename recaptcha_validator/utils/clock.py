"""Clock utility for testability."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return current UTC time. Override in tests."""
    return datetime.now(UTC)


def utc_now_iso() -> str:
    """Current UTC time as an RFC 3339 string with a ``Z`` suffix."""
    return utc_now().replace(microsecond=0).isoformat().replace("+00:00", "Z")
