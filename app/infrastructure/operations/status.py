"""Operation status enumeration.

Outcome codes shared by every AWS adapter so callers can decide whether a
failed call is worth handing back to the queue for redelivery.
"""

from enum import Enum


class OperationStatus(Enum):
    """Status codes for operation results.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Retryable error (throttling, timeout, unavailable)
        PERMANENT_ERROR: Non-retryable error (validation, rejected message)
        UNAUTHORIZED: Credentials missing or not allowed to call the API
        NOT_FOUND: Requested resource does not exist
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
