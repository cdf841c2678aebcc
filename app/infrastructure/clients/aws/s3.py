"""S3 client for reading text objects."""

import structlog

from infrastructure.clients.aws.executor import execute_aws_api_call
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.operations.result import OperationResult

logger = structlog.get_logger()


class S3Client:
    """Client for S3 object reads.

    Args:
        session_provider: SessionProvider instance for region/endpoint config
    """

    def __init__(self, session_provider: SessionProvider) -> None:
        self._session_provider = session_provider
        self._service_name = "s3"

    def get_object_text(
        self, bucket: str, key: str, encoding: str = "utf-8"
    ) -> OperationResult:
        """Download an object and decode its body.

        Args:
            bucket: Bucket name
            key: Object key
            encoding: Text encoding of the object

        Returns:
            OperationResult with the decoded body as data
        """
        result = execute_aws_api_call(
            self._service_name,
            "get_object",
            Bucket=bucket,
            Key=key,
            **self._session_provider.build_client_kwargs(),
        )
        if not result.is_success:
            return result

        try:
            text = result.data["Body"].read().decode(encoding)
        except (KeyError, AttributeError, UnicodeDecodeError) as e:
            logger.error("s3_object_read_failed", bucket=bucket, key=key, error=str(e))
            return OperationResult.permanent_error(
                message=f"Unreadable object s3://{bucket}/{key}: {e}",
                error_code="UNREADABLE_OBJECT",
            )

        return OperationResult.success(data=text, message="s3.get_object succeeded")
