"""Exceptions raised by the notification pipelines.

Every exception carries the error category used when the failure is turned
into a FailureRecord, so the batch-level handler never has to guess.
"""

from typing import List, Optional

from modules.notifications.classification import ErrorCategory, RATE_LIMIT_CODES


class NotificationPipelineError(Exception):
    """Base exception for all notification pipeline errors.

    Attributes:
        error_category: Category recorded on the resulting FailureRecord
        error_code: Optional provider error code
        transient: True when a redelivery may succeed
    """

    error_category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR

    @property
    def category(self) -> ErrorCategory:
        return self.error_category

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        transient: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.transient = transient


class MessageStructureError(NotificationPipelineError):
    """Raised when a queue message body cannot be parsed."""

    error_category = ErrorCategory.UNKNOWN_ERROR


class MessageValidationError(NotificationPipelineError):
    """Raised when a message or entity misses or breaks a required field.

    Attributes:
        errors: Every validation problem found, in a stable order
    """

    error_category = ErrorCategory.VALIDATION_ERROR

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or [message]


class InvalidTransitionError(NotificationPipelineError):
    """Raised on an illegal lifecycle transition.

    This is a programming error; it is never caught inside the pipelines.
    """


class DeliveryError(NotificationPipelineError):
    """Raised when the email service rejects or cannot accept a message.

    Attributes:
        notification_id: Notification whose delivery failed, once known
        retry_scheduled: True when the notification was left in RETRY for
            the queue to redeliver
    """

    error_category = ErrorCategory.EMAIL_SERVICE
    notification_id: Optional[str] = None
    retry_scheduled: bool = False

    @property
    def category(self) -> ErrorCategory:
        if self.error_code in RATE_LIMIT_CODES:
            return ErrorCategory.RATE_LIMIT_ERROR
        if self.transient:
            return ErrorCategory.TEMPORARY_SERVICE_ERROR
        return self.error_category


class PersistenceError(NotificationPipelineError):
    """Raised when the record store cannot persist or read a record."""

    error_category = ErrorCategory.DATABASE_ERROR


class TemplateFetchError(NotificationPipelineError):
    """Raised when a template body cannot be fetched from the blob store."""

    error_category = ErrorCategory.TEMPLATE_ERROR


class RequeueError(NotificationPipelineError):
    """Raised when a message cannot be sent back to a queue."""

    error_category = ErrorCategory.NETWORK_ERROR
