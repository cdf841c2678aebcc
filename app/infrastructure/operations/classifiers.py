"""Error classifiers for AWS SDK exceptions.

Converts botocore exceptions raised by DynamoDB, SES, S3 and SQS calls into
standardized OperationResult objects.

Usage:
    from infrastructure.operations.classifiers import classify_aws_error

    try:
        response = client.send_email(**params)
    except ClientError as e:
        return classify_aws_error(e)
"""

from botocore.exceptions import ClientError

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

# SES and SQS report throttling under several codes
THROTTLING_CODES = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "ProvisionedThroughputExceededException",
        "TooManyRequestsException",
        "MaxSendingRateExceeded",
    }
)

NOT_FOUND_CODES = frozenset(
    {
        "ResourceNotFoundException",
        "NoSuchKey",
        "NoSuchBucket",
        "AWS.SimpleQueueService.NonExistentQueue",
        "QueueDoesNotExist",
    }
)

PERMANENT_CODES = frozenset(
    {
        "ValidationException",
        "ValidationError",
        "InvalidParameterException",
        "InvalidParameterValue",
        "MessageRejected",
        "MailFromDomainNotVerifiedException",
        "ConfigurationSetDoesNotExistException",
        "AccountSendingPausedException",
        "ConditionalCheckFailedException",
        "InvalidMessageContents",
    }
)

UNAUTHORIZED_CODES = frozenset(
    {
        "AccessDenied",
        "AccessDeniedException",
        "UnauthorizedOperation",
        "UnrecognizedClientException",
        "InvalidClientTokenId",
    }
)

DEFAULT_RETRY_AFTER_SECONDS = 60


def classify_aws_error(exc: Exception) -> OperationResult:
    """Classify AWS SDK errors into OperationResult.

    Error Code Mapping:
    - Throttling family: TRANSIENT_ERROR with retry_after
    - Access denied family: UNAUTHORIZED
    - Missing table/bucket/key/queue: NOT_FOUND
    - Validation and rejected-message family: PERMANENT_ERROR
    - Other ClientError: TRANSIENT_ERROR (AWS convention)
    - Non-ClientError (BotoCoreError, connection): TRANSIENT_ERROR

    Args:
        exc: Exception raised by boto3/botocore

    Returns:
        OperationResult with status, message and the original error code
    """
    if not isinstance(exc, ClientError):
        return OperationResult.transient_error(
            f"AWS connection error: {type(exc).__name__}: {str(exc)}",
            error_code="CONNECTION_ERROR",
        )

    error_info = exc.response.get("Error", {}) if exc.response else {}
    error_code = error_info.get("Code", "Unknown")
    error_message = error_info.get("Message", str(exc))

    if error_code in THROTTLING_CODES:
        retry_after = DEFAULT_RETRY_AFTER_SECONDS
        try:
            retry_after = int(exc.response.get("RetryAfter", retry_after))
        except (TypeError, ValueError):
            pass
        return OperationResult.transient_error(
            error_message, error_code=error_code, retry_after=retry_after
        )

    if error_code in UNAUTHORIZED_CODES:
        return OperationResult.error(
            OperationStatus.UNAUTHORIZED, error_message, error_code=error_code
        )

    if error_code in NOT_FOUND_CODES:
        return OperationResult.error(
            OperationStatus.NOT_FOUND, error_message, error_code=error_code
        )

    if error_code in PERMANENT_CODES:
        return OperationResult.permanent_error(error_message, error_code=error_code)

    # Unknown service errors are transient (service degradation, 5xx)
    return OperationResult.transient_error(error_message, error_code=error_code)
