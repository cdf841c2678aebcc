"""SES-backed email service."""

import structlog

from infrastructure.clients.aws.ses import SESClient
from modules.notifications.adapters.base import EmailService
from modules.notifications.exceptions import DeliveryError

logger = structlog.get_logger()


class SESEmailService(EmailService):
    """Email service sending HTML mail through SES.

    Args:
        client: SESClient from the AWS clients facade
        source: Sender, formatted ``"Name <address>"``
    """

    def __init__(self, client: SESClient, source: str) -> None:
        self._client = client
        self._source = source

    def send(self, to: str, subject: str, html_body: str) -> str:
        result = self._client.send_email(
            source=self._source,
            to_addresses=[to],
            subject=subject,
            html_body=html_body,
        )
        if not result.is_success:
            raise DeliveryError(
                f"Failed to send email to {to}: {result.message}",
                error_code=result.error_code,
                transient=result.is_transient,
            )

        message_id = (result.data or {}).get("MessageId", "")
        logger.info("email_sent", recipient=to, provider_message_id=message_id)
        return message_id
