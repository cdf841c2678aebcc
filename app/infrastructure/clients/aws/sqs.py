"""SQS client for producing queue messages."""

from typing import Optional

import structlog

from infrastructure.clients.aws.executor import execute_aws_api_call
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.operations.result import OperationResult

logger = structlog.get_logger()

# SQS rejects DelaySeconds above 15 minutes
MAX_DELAY_SECONDS = 900


class SQSClient:
    """Client for SQS ``send_message``.

    Args:
        session_provider: SessionProvider instance for region/endpoint config
    """

    def __init__(self, session_provider: SessionProvider) -> None:
        self._session_provider = session_provider
        self._service_name = "sqs"

    def send_message(
        self,
        queue_url: str,
        message_body: str,
        delay_seconds: int = 0,
        message_group_id: Optional[str] = None,
    ) -> OperationResult:
        """Send a message to an SQS queue.

        Args:
            queue_url: The URL of the SQS queue
            message_body: Serialized message body
            delay_seconds: Delivery delay, clamped to 0..900
            message_group_id: Message group, only for FIFO queues

        Returns:
            OperationResult with the SQS response (``MessageId``) in data
        """
        params = {
            "QueueUrl": queue_url,
            "MessageBody": message_body,
            "DelaySeconds": max(0, min(delay_seconds, MAX_DELAY_SECONDS)),
        }
        if message_group_id:
            params["MessageGroupId"] = message_group_id

        logger.info(
            "sending_message",
            service=self._service_name,
            queue_url=queue_url,
            delay_seconds=params["DelaySeconds"],
        )
        return execute_aws_api_call(
            self._service_name,
            "send_message",
            **params,
            **self._session_provider.build_client_kwargs(),
        )
