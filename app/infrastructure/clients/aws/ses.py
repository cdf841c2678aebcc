"""SES client for outbound email."""

from typing import List, Optional

import structlog

from infrastructure.clients.aws.executor import execute_aws_api_call
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.operations.result import OperationResult

logger = structlog.get_logger()

CHARSET = "UTF-8"


class SESClient:
    """Client for SES ``send_email``.

    Sends are never retried in-call: the executor would retry throttling
    and any 5xx, and a retried send can deliver the same email twice.
    Redelivery belongs to the queue.

    Args:
        session_provider: SessionProvider instance for region/endpoint config
    """

    def __init__(self, session_provider: SessionProvider) -> None:
        self._session_provider = session_provider
        self._service_name = "ses"

    def send_email(
        self,
        source: str,
        to_addresses: List[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
    ) -> OperationResult:
        """Send one HTML email.

        Args:
            source: Sender, e.g. ``"Inferno Bank <no-reply@example.com>"``
            to_addresses: Recipient addresses
            subject: Subject line
            html_body: Rendered HTML body
            text_body: Optional plain text alternative

        Returns:
            OperationResult with the SES response (``MessageId``) in data
        """
        body = {"Html": {"Data": html_body, "Charset": CHARSET}}
        if text_body:
            body["Text"] = {"Data": text_body, "Charset": CHARSET}

        return execute_aws_api_call(
            self._service_name,
            "send_email",
            Source=source,
            Destination={"ToAddresses": to_addresses},
            Message={
                "Subject": {"Data": subject, "Charset": CHARSET},
                "Body": body,
            },
            max_retries=0,
            **self._session_provider.build_client_kwargs(),
        )
