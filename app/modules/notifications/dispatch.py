"""Dispatch Processor: turns queued notification events into sent emails.

Each queue record is processed on its own. A failure anywhere in one
record is recorded as a FailureRecord and never stops the rest of the
batch. Sends happen at most once per record per invocation; redelivery
is left to the queue through the partial batch response.
"""

import traceback
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from infrastructure.configuration import NotificationSettings
from infrastructure.logging import bind_request_context, get_module_logger
from modules.notifications.adapters.base import (
    EmailService,
    QueueProducer,
    RecordStore,
)
from modules.notifications.classification import categorize_error_type
from modules.notifications.exceptions import (
    DeliveryError,
    MessageValidationError,
    NotificationPipelineError,
)
from modules.notifications.failures import FailureRecord
from modules.notifications.messages import (
    QueueMessage,
    carried_count,
    extract_recipient,
    parse_body,
)
from modules.notifications.models import Notification, NotificationStatus, utc_now
from modules.notifications.template_cache import TemplateResolver
from modules.notifications.templates import (
    GENERIC_TEMPLATE,
    format_display_date,
    format_template_data,
    generate_subject,
    render_template,
)

logger = get_module_logger()

UNKNOWN_KIND = "UNKNOWN"


@dataclass
class DispatchBatchResult:
    """Outcome of one dispatch batch."""

    successful: int = 0
    failed: int = 0
    errors: List[Dict[str, str]] = field(default_factory=list)
    batch_item_failures: List[str] = field(default_factory=list)
    """Message ids left in RETRY, reported back to the queue."""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "successful": self.successful,
            "failed": self.failed,
            "errors": list(self.errors),
        }

    def to_batch_response(self) -> Dict[str, Any]:
        """SQS partial batch response for the Lambda event source mapping."""
        return {
            "batchItemFailures": [
                {"itemIdentifier": message_id}
                for message_id in self.batch_item_failures
            ]
        }


def validate_message_structure(message: Dict[str, Any]) -> str:
    """Check the wire fields every message needs and return the recipient.

    Raises:
        MessageValidationError: on the first missing field
    """
    if not message.get("type"):
        raise MessageValidationError("Message must have a type field")

    if not isinstance(message.get("data"), dict):
        raise MessageValidationError("Message must have a data object")

    recipient = extract_recipient(message)
    if not recipient:
        raise MessageValidationError("Message must include email address")
    return recipient


class DispatchProcessor:
    """Send one email per queued notification event.

    Args:
        record_store: Where Notifications and FailureRecords are written
        email_service: Outgoing mail provider
        template_resolver: Resolves (cached) HTML bodies per kind
        settings: Notification pipeline settings
        queue_producer: Used to forward terminal failures to the dead-letter
            queue when ``settings.DLQ_URL`` is set

    Example:
        processor = DispatchProcessor(store, email, resolver, settings)
        result = processor.process_batch(event["Records"])
    """

    def __init__(
        self,
        record_store: RecordStore,
        email_service: EmailService,
        template_resolver: TemplateResolver,
        settings: NotificationSettings,
        queue_producer: Optional[QueueProducer] = None,
    ):
        self._record_store = record_store
        self._email_service = email_service
        self._template_resolver = template_resolver
        self._settings = settings
        self._queue_producer = queue_producer

    def process_batch(self, records: Iterable[Dict[str, Any]]) -> DispatchBatchResult:
        records = list(records or [])
        result = DispatchBatchResult()
        logger.info("dispatch_batch_started", record_count=len(records))

        for record in records:
            message = QueueMessage.from_record(record)
            with bind_request_context(
                correlation_id=message.message_id or None,
                pipeline="dispatch",
                receive_count=message.receive_count,
            ):
                try:
                    self.process_message(message)
                    result.successful += 1
                except Exception as e:  # pylint: disable=broad-except
                    result.failed += 1
                    result.errors.append(
                        {"messageId": message.message_id, "error": str(e)}
                    )
                    if isinstance(e, DeliveryError) and e.retry_scheduled:
                        result.batch_item_failures.append(message.message_id)
                    logger.error(
                        "notification_message_failed",
                        message_id=message.message_id,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    self._handle_failure(message, e)

        logger.info(
            "dispatch_batch_completed",
            successful=result.successful,
            failed=result.failed,
            retrying=len(result.batch_item_failures),
        )
        return result

    def process_message(self, message: QueueMessage) -> Notification:
        """Deliver one queue message.

        Raises:
            MessageStructureError: if the body cannot be parsed
            MessageValidationError: if required fields are missing or invalid
            PersistenceError: if the Notification cannot be written
            DeliveryError: if the email service rejects the message
        """
        body = parse_body(message.body)
        logger.info(
            "processing_notification_message",
            message_id=message.message_id,
            type=body.get("type"),
        )

        recipient = validate_message_structure(body)
        payload = body["data"]
        notification = Notification.create(
            kind=body["type"],
            recipient=recipient,
            subject=generate_subject(body["type"], payload),
            payload=payload,
        )

        self._record_store.put(
            self._settings.NOTIFICATIONS_TABLE, notification.to_item()
        )

        try:
            html_body = self.render(notification, body.get("useGenericTemplate"))
            provider_message_id = self._email_service.send(
                notification.recipient, notification.subject, html_body
            )
        except DeliveryError as e:
            self._record_failed_attempt(notification, message, e)
            raise

        notification.mark_sent(provider_message_id)
        self._record_store.put(
            self._settings.NOTIFICATIONS_TABLE, notification.to_item()
        )
        logger.info(
            "notification_sent",
            notification_id=notification.id,
            recipient=notification.recipient,
            kind=notification.kind.value,
        )
        return notification

    def render(self, notification: Notification, use_generic: Any = False) -> str:
        """Render the email body for a notification.

        The generation date is always available as ``{{date}}``; a ``date``
        field in the payload takes precedence over it.
        """
        if use_generic is True:
            template = GENERIC_TEMPLATE
        else:
            template = self._template_resolver.resolve(notification.kind)

        timezone_name = self._settings.TIMEZONE
        values: Dict[str, Any] = {
            "date": format_display_date(utc_now(), timezone_name)
        }
        values.update(format_template_data(notification.payload, timezone_name))
        return render_template(template, values)

    def _record_failed_attempt(
        self, notification: Notification, message: QueueMessage, error: DeliveryError
    ) -> None:
        if message.receive_count < self._settings.MAX_ATTEMPTS:
            notification.mark_retry(error.message)
            logger.warning(
                "notification_marked_for_retry",
                notification_id=notification.id,
                receive_count=message.receive_count,
                max_attempts=self._settings.MAX_ATTEMPTS,
            )
        else:
            notification.mark_failed(error.message)
            logger.warning(
                "notification_marked_failed",
                notification_id=notification.id,
                receive_count=message.receive_count,
            )

        error.notification_id = notification.id
        error.retry_scheduled = notification.status == NotificationStatus.RETRY
        # A failed status write must not replace the delivery error
        try:
            self._record_store.put(
                self._settings.NOTIFICATIONS_TABLE, notification.to_item()
            )
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "notification_status_write_failed",
                notification_id=notification.id,
                status=notification.status.value,
                error=str(e),
            )

    def _handle_failure(self, message: QueueMessage, error: Exception) -> None:
        """Record a FailureRecord and forward terminal failures.

        Best effort: problems here are logged and never raised.
        """
        try:
            body = parse_body(message.body)
        except NotificationPipelineError:
            body = {}

        record = build_failure_record(message, body, error)
        try:
            self._record_store.put(
                self._settings.NOTIFICATION_ERRORS_TABLE, record.to_item()
            )
            logger.info(
                "failure_record_saved",
                failure_id=record.id,
                error_category=record.error_category.value,
            )
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "failure_record_save_failed", failure_id=record.id, error=str(e)
            )

        retry_scheduled = isinstance(error, DeliveryError) and error.retry_scheduled
        if not retry_scheduled:
            self._forward_to_dead_letter_queue(body, record)

    def _forward_to_dead_letter_queue(
        self, body: Dict[str, Any], record: FailureRecord
    ) -> None:
        if not self._settings.DLQ_URL or self._queue_producer is None:
            return

        forwarded = dict(body) if body else {"type": UNKNOWN_KIND, "data": {}}
        forwarded["errorInfo"] = {
            "errorType": record.error_category.value,
            "errorMessage": record.error_message,
            "errorStack": record.error_detail,
            "notificationId": record.original_notification_id,
            "receiveCount": record.receive_count,
            "attempts": record.attempts,
        }
        try:
            self._queue_producer.send(self._settings.DLQ_URL, forwarded)
            logger.info("failure_forwarded_to_dlq", failure_id=record.id)
        except Exception as e:  # pylint: disable=broad-except
            logger.error("failure_forward_failed", failure_id=record.id, error=str(e))


def build_failure_record(
    message: QueueMessage, body: Dict[str, Any], error: Exception
) -> FailureRecord:
    """FailureRecord for a dispatch failure, linked to its Notification if any."""
    if isinstance(error, NotificationPipelineError):
        category = error.category
    else:
        category = categorize_error_type(type(error).__name__)

    return FailureRecord(
        original_notification_id=getattr(error, "notification_id", None),
        kind=str(body.get("type") or UNKNOWN_KIND),
        recipient=extract_recipient(body),
        error_type=type(error).__name__,
        error_category=category,
        error_message=str(error),
        error_detail="".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        ),
        source_message_id=message.message_id or None,
        receive_count=message.receive_count,
        attempts=carried_count(body, "previousAttempts") + message.receive_count,
    )
