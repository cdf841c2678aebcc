"""FailureRecord entity.

A FailureRecord is the persisted account of one abandoned delivery. It is
written once when created and at most once more, when the failure
resolution engine marks it resolved.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from modules.notifications.classification import (
    CRITICAL_CATEGORIES,
    ErrorCategory,
    categorize_error_type,
)
from modules.notifications.exceptions import InvalidTransitionError
from modules.notifications.models import is_valid_email, utc_now

DEFAULT_CRITICAL_ATTEMPTS = 5


class FailureRecord(BaseModel):
    """Classified account of a delivery failure.

    Attributes:
        id: Unique identifier
        original_notification_id: Notification that failed, when known
        kind: Notification type copied from the message (free text, may be
            ``UNKNOWN`` or invalid)
        recipient: Recipient copied from the message, when resolvable
        error_type: Raw error type name (exception class, upstream type)
        error_category: Classified category
        error_message: Human-readable diagnostic
        error_detail: Stack/trace text
        source_message_id: Queue message that produced this record
        receive_count: Times the queue delivered the message
        attempts: Delivery attempts behind this failure
        resolution_action: Remediation action taken, if any
        resolved: Whether automatic or manual remediation succeeded
        resolved_at: When the record was resolved
        resolved_by: Who or what resolved it
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    original_notification_id: Optional[str] = None
    kind: Optional[str] = None
    recipient: Optional[str] = None
    error_type: Optional[str] = None
    error_category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR
    error_message: str = ""
    error_detail: Optional[str] = None
    source_message_id: Optional[str] = None
    receive_count: int = Field(default=0, ge=0)
    attempts: int = Field(default=0, ge=0)
    last_attempt_at: datetime = Field(default_factory=utc_now)
    resolution_action: Optional[str] = None
    resolved: bool = False
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="before")
    @classmethod
    def derive_category(cls, data: Any) -> Any:
        """Classify from ``error_type`` when no category is given."""
        if isinstance(data, dict) and not data.get("error_category"):
            category = categorize_error_type(data.get("error_type"))
            data = {**data, "error_category": category}
        return data

    @model_validator(mode="after")
    def check_resolution(self) -> "FailureRecord":
        if self.resolved and (self.resolved_at is None or self.resolved_by is None):
            raise ValueError("A resolved record needs resolved_at and resolved_by")
        return self

    def validate_fields(self) -> List[str]:
        """List the problems that make this record unfit for reporting."""
        errors = []
        if not self.error_type:
            errors.append("Error type is required")
        if not self.error_message or not self.error_message.strip():
            errors.append("Error message is required")
        if self.recipient and not is_valid_email(self.recipient):
            errors.append("Invalid email format")
        return errors

    def is_critical(self, attempts_threshold: int = DEFAULT_CRITICAL_ATTEMPTS) -> bool:
        """Critical failures page an administrator, resolved or not."""
        return (
            self.error_category in CRITICAL_CATEGORIES
            or self.attempts >= attempts_threshold
        )

    def mark_resolved(self, resolved_by: str = "system") -> None:
        if self.resolved:
            raise InvalidTransitionError(f"Failure record {self.id} is already resolved")
        self.resolved_at = utc_now()
        self.resolved_by = resolved_by
        self.resolved = True

    def to_item(self) -> Dict[str, Any]:
        """JSON-compatible projection; ``resolved`` stays a real boolean."""
        return self.model_dump(mode="json")

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "FailureRecord":
        return cls.model_validate(item)
