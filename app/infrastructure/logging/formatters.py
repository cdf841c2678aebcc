"""Structlog processors used by the notification pipelines.

Each factory returns a processor with the structlog signature
``(logger, method_name, event_dict) -> event_dict``.
"""

from typing import Any, Callable, Iterable, MutableMapping

EventDict = MutableMapping[str, Any]
Processor = Callable[[Any, str, EventDict], EventDict]

REDACTED = "***REDACTED***"

# Key fragments whose values never reach the logs
SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "secret",
        "token",
        "api_key",
        "authorization",
        "credential",
        "access_key",
        "session_token",
        "receipt_handle",
    }
)

# Keys holding email addresses of bank customers
RECIPIENT_FIELDS = frozenset({"recipient", "email", "user_email", "to"})


def add_app_info(app_name: str, app_version: str = "unknown") -> Processor:
    """Stamp every event with the application name and deployed version."""

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict["app_name"] = app_name
        event_dict["app_version"] = app_version
        return event_dict

    return processor


def mask_sensitive_data(
    mask_value: str = REDACTED,
    additional_patterns: frozenset[str] | None = None,
) -> Processor:
    """Replace values whose key contains a sensitive fragment.

    Matching is case-insensitive; ``None`` values are left alone.
    """
    patterns = SENSITIVE_PATTERNS | (additional_patterns or frozenset())

    def is_sensitive(key: str) -> bool:
        lowered = key.lower()
        return any(pattern in lowered for pattern in patterns)

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        return {
            key: mask_value if value is not None and is_sensitive(key) else value
            for key, value in event_dict.items()
        }

    return processor


def obscure_email(address: str) -> str:
    """``user@example.com`` -> ``u***@example.com``; non-addresses unchanged."""
    local, sep, domain = address.partition("@")
    if not sep or not local:
        return address
    return f"{local[0]}***@{domain}"


def mask_recipients(fields: Iterable[str] = RECIPIENT_FIELDS) -> Processor:
    """Keep only the first character of the local part of recipient addresses.

    The domain survives so delivery problems can still be grouped by
    provider.
    """
    keys = frozenset(fields)

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        for key in event_dict.keys() & keys:
            value = event_dict[key]
            if isinstance(value, str):
                event_dict[key] = obscure_email(value)
        return event_dict

    return processor


def truncate_large_values(max_length: int = 500) -> Processor:
    """Cut long strings such as rendered HTML bodies and stack traces."""

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    f"{value[:max_length]}...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor
