"""Unit tests for error categorization and the pipeline exceptions."""

import pytest

from modules.notifications.classification import (
    CRITICAL_CATEGORIES,
    ErrorCategory,
    categorize_error_type,
)
from modules.notifications.exceptions import (
    DeliveryError,
    MessageStructureError,
    MessageValidationError,
    PersistenceError,
    RequeueError,
    TemplateFetchError,
)


@pytest.mark.unit
class TestCategorizeErrorType:
    @pytest.mark.parametrize(
        "error_type, expected",
        [
            ("RateLimitExceeded", ErrorCategory.RATE_LIMIT_ERROR),
            ("ThrottlingException", ErrorCategory.RATE_LIMIT_ERROR),
            ("ServiceTemporarilyUnavailable", ErrorCategory.TEMPORARY_SERVICE_ERROR),
            ("SESError", ErrorCategory.EMAIL_SERVICE),
            ("DeliveryError", ErrorCategory.EMAIL_SERVICE),
            ("S3Error", ErrorCategory.TEMPLATE_ERROR),
            ("TemplateFetchError", ErrorCategory.TEMPLATE_ERROR),
            ("DynamoDBError", ErrorCategory.DATABASE_ERROR),
            ("PersistenceError", ErrorCategory.DATABASE_ERROR),
            ("MessageValidationError", ErrorCategory.VALIDATION_ERROR),
            ("ConnectionTimeout", ErrorCategory.NETWORK_ERROR),
            ("KeyError", ErrorCategory.UNKNOWN_ERROR),
        ],
    )
    def test_fragment_matching(self, error_type, expected):
        assert categorize_error_type(error_type) == expected

    def test_category_names_map_to_themselves(self):
        for category in ErrorCategory:
            assert categorize_error_type(category.value) == category

    def test_category_name_match_ignores_case(self):
        assert categorize_error_type(" rate_limit_error ") == (
            ErrorCategory.RATE_LIMIT_ERROR
        )

    @pytest.mark.parametrize("error_type", [None, ""])
    def test_missing_type_is_unknown(self, error_type):
        assert categorize_error_type(error_type) == ErrorCategory.UNKNOWN_ERROR

    def test_rate_limit_checked_before_email_service(self):
        assert categorize_error_type("SESThrottling") == ErrorCategory.RATE_LIMIT_ERROR

    def test_critical_categories(self):
        assert CRITICAL_CATEGORIES == {
            ErrorCategory.DATABASE_ERROR,
            ErrorCategory.EMAIL_SERVICE,
        }


@pytest.mark.unit
class TestExceptionCategories:
    @pytest.mark.parametrize(
        "error, expected",
        [
            (MessageStructureError("bad json"), ErrorCategory.UNKNOWN_ERROR),
            (MessageValidationError("no email"), ErrorCategory.VALIDATION_ERROR),
            (PersistenceError("down"), ErrorCategory.DATABASE_ERROR),
            (TemplateFetchError("missing"), ErrorCategory.TEMPLATE_ERROR),
            (RequeueError("queue down"), ErrorCategory.NETWORK_ERROR),
            (DeliveryError("rejected"), ErrorCategory.EMAIL_SERVICE),
        ],
    )
    def test_category(self, error, expected):
        assert error.category == expected

    def test_delivery_rate_limit_code(self):
        error = DeliveryError("slow down", error_code="Throttling", transient=True)

        assert error.category == ErrorCategory.RATE_LIMIT_ERROR

    def test_delivery_transient_without_rate_limit_code(self):
        error = DeliveryError(
            "unavailable", error_code="ServiceUnavailable", transient=True
        )

        assert error.category == ErrorCategory.TEMPORARY_SERVICE_ERROR

    def test_delivery_defaults(self):
        error = DeliveryError("rejected", error_code="MessageRejected")

        assert error.notification_id is None
        assert error.retry_scheduled is False
        assert error.transient is False
        assert str(error) == "rejected"

    def test_validation_errors_default_to_message(self):
        error = MessageValidationError("Message must have a type field")

        assert error.errors == ["Message must have a type field"]
