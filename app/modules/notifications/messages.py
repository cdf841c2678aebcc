"""Queue message envelope and wire-body helpers shared by both pipelines.

Wire body:
    {
        "type": "WELCOME",
        "email": "user@example.com",          # optional
        "userEmail": "user@example.com",      # optional
        "data": {"email": ..., "userEmail": ..., ...fields},
        "errorInfo": {"errorType": ..., "errorMessage": ..., "errorStack": ...,
                      "notificationId": ..., "receiveCount": ..., "attempts": ...},
        "useGenericTemplate": true,           # optional, set on fallback retry
        "remediationCount": 1,                # set on every automatic re-delivery
        "previousAttempts": 3                 # deliveries before the re-delivery
    }
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from modules.notifications.exceptions import MessageStructureError

RECEIVE_COUNT_ATTRIBUTE = "ApproximateReceiveCount"


def _safe_int(value: Any, default: int = 1) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class QueueMessage:
    """One record of an SQS-triggered Lambda event."""

    message_id: str
    """Queue-assigned message id; also the log correlation id."""

    body: str = ""
    """Raw body string, not yet parsed."""

    receive_count: int = 1
    """How many times the queue has delivered this message."""

    attributes: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "QueueMessage":
        attributes = record.get("attributes") or {}
        return cls(
            message_id=record.get("messageId") or "",
            body=record.get("body") or "",
            receive_count=_safe_int(attributes.get(RECEIVE_COUNT_ATTRIBUTE)),
            attributes=attributes,
        )


def parse_body(body: str) -> Dict[str, Any]:
    """Parse a message body into a mapping.

    Raises:
        MessageStructureError: if the body is not a JSON object
    """
    try:
        parsed = json.loads(body)
    except (TypeError, ValueError) as e:
        raise MessageStructureError(f"Message body is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise MessageStructureError("Message body must be a JSON object")
    return parsed


def extract_recipient(message: Dict[str, Any]) -> Optional[str]:
    """Resolve the recipient address of a wire message.

    Order: ``email``, ``data.email``, ``userEmail``, ``data.userEmail``.
    """
    data = message.get("data")
    if not isinstance(data, dict):
        data = {}
    for candidate in (
        message.get("email"),
        data.get("email"),
        message.get("userEmail"),
        data.get("userEmail"),
    ):
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return None


def carried_count(mapping: Any, key: str) -> int:
    """Non-negative counter carried in a wire mapping; 0 when absent or bad."""
    if not isinstance(mapping, dict):
        return 0
    return max(0, _safe_int(mapping.get(key), default=0))
