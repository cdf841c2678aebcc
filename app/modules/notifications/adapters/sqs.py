"""SQS-backed queue producer."""

import json
from typing import Any, Dict

import structlog

from infrastructure.clients.aws.sqs import SQSClient
from modules.notifications.adapters.base import QueueProducer
from modules.notifications.exceptions import RequeueError

logger = structlog.get_logger()


class SQSQueueProducer(QueueProducer):
    """Queue producer sending JSON bodies to SQS queues."""

    def __init__(self, client: SQSClient) -> None:
        self._client = client

    def send(self, queue_url: str, body: Dict[str, Any], delay_seconds: int = 0) -> str:
        result = self._client.send_message(
            queue_url=queue_url,
            message_body=json.dumps(body, default=str),
            delay_seconds=delay_seconds,
        )
        if not result.is_success:
            raise RequeueError(
                f"Failed to enqueue message on {queue_url}: {result.message}",
                error_code=result.error_code,
                transient=result.is_transient,
            )
        return (result.data or {}).get("MessageId", "")
