"""Failure taxonomy shared by both pipelines."""

from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    """Category recorded on every FailureRecord."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    TEMPLATE_ERROR = "TEMPLATE_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    TEMPORARY_SERVICE_ERROR = "TEMPORARY_SERVICE_ERROR"
    REPEATED_FAILURE = "REPEATED_FAILURE"
    EMAIL_SERVICE = "EMAIL_SERVICE"
    DATABASE_ERROR = "DATABASE_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


CRITICAL_CATEGORIES = frozenset(
    {ErrorCategory.DATABASE_ERROR, ErrorCategory.EMAIL_SERVICE}
)

# Provider codes that mean "slow down" rather than "broken"
RATE_LIMIT_CODES = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "MaxSendingRateExceeded",
        "TooManyRequestsException",
        "RequestLimitExceeded",
    }
)

# Ordered: the first matching fragment wins
_TYPE_FRAGMENTS = (
    (
        ("ratelimit", "rate_limit", "rate limit", "throttl"),
        ErrorCategory.RATE_LIMIT_ERROR,
    ),
    (("temporar", "unavailable"), ErrorCategory.TEMPORARY_SERVICE_ERROR),
    (("ses", "email", "delivery"), ErrorCategory.EMAIL_SERVICE),
    (("s3", "template"), ErrorCategory.TEMPLATE_ERROR),
    (("dynamodb", "database", "persistence"), ErrorCategory.DATABASE_ERROR),
    (("validation",), ErrorCategory.VALIDATION_ERROR),
    (("timeout", "network", "connection"), ErrorCategory.NETWORK_ERROR),
    (("repeated",), ErrorCategory.REPEATED_FAILURE),
)


def categorize_error_type(error_type: Optional[str]) -> ErrorCategory:
    """Map a raw error type name (e.g. ``"SESError"``) to an ErrorCategory.

    A value that already names a category is returned as that category.
    """
    if not error_type:
        return ErrorCategory.UNKNOWN_ERROR

    try:
        return ErrorCategory(error_type.strip().upper())
    except ValueError:
        pass

    lowered = error_type.lower()
    for fragments, category in _TYPE_FRAGMENTS:
        if any(fragment in lowered for fragment in fragments):
            return category
    return ErrorCategory.UNKNOWN_ERROR
