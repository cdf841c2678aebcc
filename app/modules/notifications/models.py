"""Notification entity and its delivery lifecycle.

A Notification is one tracked attempt to deliver an email for a domain
event. It is created PENDING and moves exactly once to SENT, FAILED or
RETRY within a single invocation:

    PENDING -> SENT     (terminal success)
    PENDING -> FAILED   (terminal failure)
    PENDING -> RETRY    (left to the queue to redeliver)

Uses Pydantic BaseModel for field validation and for the JSON-compatible
projection written to the record store.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, ValidationError, field_validator

from modules.notifications.exceptions import (
    InvalidTransitionError,
    MessageValidationError,
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEFAULT_MAX_ATTEMPTS = 3


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_email(value: Optional[str]) -> bool:
    """Basic ``local@domain.tld`` syntax check."""
    return bool(value) and EMAIL_PATTERN.match(value) is not None


class NotificationType(str, Enum):
    """Closed set of notification kinds, valued by their wire names."""

    WELCOME = "WELCOME"
    USER_LOGIN = "USER.LOGIN"
    USER_UPDATE = "USER.UPDATE"
    CARD_CREATE = "CARD.CREATE"
    CARD_ACTIVATE = "CARD.ACTIVATE"
    TRANSACTION_PURCHASE = "TRANSACTION.PURCHASE"
    TRANSACTION_SAVE = "TRANSACTION.SAVE"
    TRANSACTION_PAID = "TRANSACTION.PAID"
    REPORT_ACTIVITY = "REPORT.ACTIVITY"

    @classmethod
    def parse(cls, value: Any) -> Optional["NotificationType"]:
        """Return the member for a wire value, or None when unknown."""
        try:
            return cls(value)
        except ValueError:
            return None


class NotificationStatus(str, Enum):
    """Delivery status of a Notification."""

    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"
    RETRY = "RETRY"


class Notification(BaseModel):
    """One email-dispatch attempt.

    Attributes:
        id: Unique identifier, assigned at creation
        kind: Notification type
        recipient: Destination email address
        subject: Subject line derived from kind and payload
        payload: Loosely-typed fields supplied by the originating event
        status: Delivery status (PENDING until the attempt completes)
        attempts: Failed delivery attempts, only ever incremented
        last_attempt_at: When the last failed attempt happened
        sent_at: When the email service accepted the message
        last_error: Error text of the last failed attempt
        provider_message_id: Message id assigned by the email service

    Example:
        notification = Notification.create(
            kind="WELCOME",
            recipient="user@example.com",
            subject="Welcome to Inferno Bank!",
            payload={"fullName": "Ana"},
        )
        notification.mark_sent()
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    kind: NotificationType
    recipient: str
    subject: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    status: NotificationStatus = NotificationStatus.PENDING
    attempts: int = Field(default=0, ge=0)
    last_attempt_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    last_error: Optional[str] = None
    provider_message_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("recipient")
    @classmethod
    def validate_recipient(cls, v: str) -> str:
        if not is_valid_email(v):
            raise ValueError(f"Invalid email format: {v!r}")
        return v

    @field_validator("subject")
    @classmethod
    def validate_subject(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Subject is required")
        return v

    @classmethod
    def create(
        cls,
        kind: Any,
        recipient: Any,
        subject: Any,
        payload: Optional[Dict[str, Any]] = None,
    ) -> "Notification":
        """Build a PENDING notification, reporting every invalid field.

        Raises:
            MessageValidationError: with one entry per invalid field
        """
        try:
            return cls(
                kind=kind,
                recipient=recipient,
                subject=subject,
                payload=payload or {},
            )
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            raise MessageValidationError(
                f"Invalid notification data: {', '.join(errors)}", errors=errors
            ) from e

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "Notification":
        """Rebuild a notification from its stored projection."""
        return cls.model_validate(item)

    def to_item(self) -> Dict[str, Any]:
        """JSON-compatible projection written to the record store."""
        return self.model_dump(mode="json")

    def mark_sent(self, provider_message_id: Optional[str] = None) -> None:
        if self.status != NotificationStatus.PENDING:
            raise InvalidTransitionError(
                f"Cannot mark notification {self.id} as SENT from {self.status.value}"
            )
        now = utc_now()
        self.status = NotificationStatus.SENT
        self.sent_at = now
        self.last_error = None
        self.provider_message_id = provider_message_id
        self.updated_at = now

    def mark_failed(self, error_message: str) -> None:
        self._record_failed_attempt(NotificationStatus.FAILED, error_message)

    def mark_retry(self, error_message: str) -> None:
        self._record_failed_attempt(NotificationStatus.RETRY, error_message)

    def should_retry(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> bool:
        return self.status == NotificationStatus.RETRY and self.attempts < max_attempts

    def _record_failed_attempt(
        self, status: NotificationStatus, error_message: str
    ) -> None:
        if self.status == NotificationStatus.SENT:
            raise InvalidTransitionError(
                f"Cannot mark notification {self.id} as {status.value}: already SENT"
            )
        now = utc_now()
        self.status = status
        self.last_error = error_message
        self.last_attempt_at = now
        self.attempts += 1
        self.updated_at = now
