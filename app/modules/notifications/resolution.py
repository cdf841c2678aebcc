"""Failure Resolution Engine: classify, remediate and escalate dead letters.

Messages reaching the dead-letter queue are classified, recorded as
FailureRecords and, for a closed set of categories, remediated by sending
them back to the main queue. Critical failures page an administrator.

Remediation is a table from ErrorCategory to a strategy function; adding a
category means adding one entry to ``RESOLUTION_STRATEGIES``.
"""

import html
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional

from infrastructure.configuration import NotificationSettings
from infrastructure.logging import bind_request_context, get_module_logger
from modules.notifications.adapters.base import (
    EmailService,
    QueueProducer,
    RecordStore,
)
from modules.notifications.classification import ErrorCategory, categorize_error_type
from modules.notifications.exceptions import MessageStructureError
from modules.notifications.failures import FailureRecord
from modules.notifications.messages import (
    QueueMessage,
    carried_count,
    extract_recipient,
    parse_body,
)

logger = get_module_logger()

AUTOMATIC_RESOLVER = "automatic-resolution"
DEFAULT_ERROR_MESSAGE = "Message failed to process after multiple attempts"
UNKNOWN_KIND = "UNKNOWN"


class ResolutionAction(str, Enum):
    """Remediation action recorded on a FailureRecord."""

    ATTEMPTED_EMAIL_LOOKUP = "ATTEMPTED_EMAIL_LOOKUP"
    FALLBACK_TEMPLATE_USED = "FALLBACK_TEMPLATE_USED"
    SCHEDULED_FOR_RETRY = "SCHEDULED_FOR_RETRY"
    IMMEDIATE_RETRY_ATTEMPTED = "IMMEDIATE_RETRY_ATTEMPTED"
    REQUIRES_MANUAL_INVESTIGATION = "REQUIRES_MANUAL_INVESTIGATION"
    RESOLUTION_FAILED = "RESOLUTION_FAILED"


@dataclass
class FailureAnalysis:
    """Classification of one dead-lettered message."""

    error_type: str
    category: ErrorCategory
    error_message: str
    error_detail: Optional[str] = None
    receive_count: int = 0
    """Highest receive count seen, here or carried from the dispatch queue."""

    attempts: int = 0
    """Deliveries behind this failure across every automatic re-delivery."""

    remediation_count: int = 0
    inferred: bool = True
    """False when the upstream pipeline supplied ``errorInfo``."""


@dataclass
class ResolutionOutcome:
    action: ResolutionAction
    resolved: bool = False


@dataclass
class ResolutionContext:
    """Everything a remediation strategy may look at or act through."""

    message: Dict[str, Any]
    analysis: FailureAnalysis
    settings: NotificationSettings
    queue_producer: Optional[QueueProducer] = None


def _optional_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _notification_id(message: Dict[str, Any]) -> Optional[str]:
    error_info = message.get("errorInfo")
    if isinstance(error_info, dict) and error_info.get("notificationId"):
        return str(error_info["notificationId"])
    return _optional_text(message.get("notificationId"))


def analyze_failure(
    message: Dict[str, Any], receive_count: int, repeated_failure_threshold: int = 3
) -> FailureAnalysis:
    """Classify a dead-lettered message.

    Upstream ``errorInfo`` is authoritative. Without it the category is
    inferred from the message shape and the receive count, first match wins:
    no resolvable recipient, no type, receive count above the threshold.

    A message forwarded by the dispatch pipeline arrives with a fresh queue
    receive count, so the counters it carries win when they are higher.
    """
    error_info = message.get("errorInfo")
    receive_count = max(receive_count, carried_count(error_info, "receiveCount"))
    attempts = max(
        receive_count,
        carried_count(error_info, "attempts"),
        carried_count(message, "previousAttempts") + receive_count,
    )
    remediation_count = carried_count(message, "remediationCount")

    if isinstance(error_info, dict):
        error_type = str(error_info.get("errorType") or "PROCESSING_ERROR")
        return FailureAnalysis(
            error_type=error_type,
            category=categorize_error_type(error_type),
            error_message=str(error_info.get("errorMessage") or DEFAULT_ERROR_MESSAGE),
            error_detail=_optional_text(error_info.get("errorStack")),
            receive_count=receive_count,
            attempts=attempts,
            remediation_count=remediation_count,
            inferred=False,
        )

    if not extract_recipient(message):
        category = ErrorCategory.VALIDATION_ERROR
        error_message = "Missing email address in notification message"
    elif not message.get("type"):
        category = ErrorCategory.VALIDATION_ERROR
        error_message = "Missing notification type"
    elif receive_count > repeated_failure_threshold:
        category = ErrorCategory.REPEATED_FAILURE
        error_message = (
            f"Message failed {receive_count} times, likely persistent issue"
        )
    else:
        category = ErrorCategory.UNKNOWN_ERROR
        error_message = DEFAULT_ERROR_MESSAGE

    return FailureAnalysis(
        error_type=category.value,
        category=category,
        error_message=error_message,
        receive_count=receive_count,
        attempts=attempts,
        remediation_count=remediation_count,
    )


def _requeue(
    context: ResolutionContext, delay_seconds: int = 0, use_generic_template=False
) -> None:
    """Send the original message back to the main queue.

    Without a configured queue the remediation is only logged.

    Raises:
        RequeueError: if the queue rejects the message
    """
    body = {k: v for k, v in context.message.items() if k != "errorInfo"}
    body["remediationCount"] = context.analysis.remediation_count + 1
    body["previousAttempts"] = context.analysis.attempts
    if use_generic_template:
        body["useGenericTemplate"] = True

    queue_url = context.settings.QUEUE_URL
    if not queue_url or context.queue_producer is None:
        logger.info(
            "remediation_requeue_skipped",
            reason="no queue configured",
            type=body.get("type"),
            delay_seconds=delay_seconds,
            use_generic_template=use_generic_template,
        )
        return

    message_id = context.queue_producer.send(
        queue_url, body, delay_seconds=delay_seconds
    )
    logger.info(
        "notification_requeued",
        queue_message_id=message_id,
        type=body.get("type"),
        delay_seconds=delay_seconds,
        use_generic_template=use_generic_template,
    )


def _manual_investigation(context: ResolutionContext) -> ResolutionOutcome:
    return ResolutionOutcome(ResolutionAction.REQUIRES_MANUAL_INVESTIGATION)


def _resolve_validation_error(context: ResolutionContext) -> ResolutionOutcome:
    message = context.message
    data = message.get("data") if isinstance(message.get("data"), dict) else {}
    user_id = message.get("userId") or data.get("userId")
    if user_id and not extract_recipient(message):
        # The user directory is not reachable from here
        logger.info("email_lookup_needed", user_id=user_id)
        return ResolutionOutcome(ResolutionAction.ATTEMPTED_EMAIL_LOOKUP)
    return _manual_investigation(context)


def _resolve_template_error(context: ResolutionContext) -> ResolutionOutcome:
    _requeue(context, use_generic_template=True)
    return ResolutionOutcome(ResolutionAction.FALLBACK_TEMPLATE_USED, resolved=True)


def _resolve_rate_limit(context: ResolutionContext) -> ResolutionOutcome:
    _requeue(context, delay_seconds=context.settings.DELAYED_RETRY_SECONDS)
    return ResolutionOutcome(ResolutionAction.SCHEDULED_FOR_RETRY, resolved=True)


def _resolve_temporary_error(context: ResolutionContext) -> ResolutionOutcome:
    max_receive_count = context.settings.IMMEDIATE_RETRY_MAX_RECEIVE_COUNT
    if context.analysis.receive_count > max_receive_count:
        return _manual_investigation(context)
    _requeue(context)
    return ResolutionOutcome(ResolutionAction.IMMEDIATE_RETRY_ATTEMPTED, resolved=True)


ResolutionStrategy = Callable[[ResolutionContext], ResolutionOutcome]

RESOLUTION_STRATEGIES: Dict[ErrorCategory, ResolutionStrategy] = {
    ErrorCategory.VALIDATION_ERROR: _resolve_validation_error,
    ErrorCategory.TEMPLATE_ERROR: _resolve_template_error,
    ErrorCategory.RATE_LIMIT_ERROR: _resolve_rate_limit,
    ErrorCategory.TEMPORARY_SERVICE_ERROR: _resolve_temporary_error,
}

# Strategies that send the message back to the main queue
REQUEUE_CATEGORIES = frozenset(
    {
        ErrorCategory.TEMPLATE_ERROR,
        ErrorCategory.RATE_LIMIT_ERROR,
        ErrorCategory.TEMPORARY_SERVICE_ERROR,
    }
)


def attempt_resolution(context: ResolutionContext) -> ResolutionOutcome:
    """Run the strategy for the analysed category.

    Never raises; a failing strategy yields ``RESOLUTION_FAILED``. A message
    already re-delivered ``MAX_REMEDIATIONS`` times is left for manual
    investigation instead of being sent round again.
    """
    analysis = context.analysis
    if (
        analysis.category in REQUEUE_CATEGORIES
        and analysis.remediation_count >= context.settings.MAX_REMEDIATIONS
    ):
        logger.warning(
            "remediation_limit_reached",
            category=analysis.category.value,
            remediation_count=analysis.remediation_count,
            attempts=analysis.attempts,
        )
        return _manual_investigation(context)

    strategy = RESOLUTION_STRATEGIES.get(
        context.analysis.category, _manual_investigation
    )
    try:
        return strategy(context)
    except Exception as e:  # pylint: disable=broad-except
        logger.error(
            "automatic_resolution_failed",
            category=context.analysis.category.value,
            error=str(e),
            error_type=type(e).__name__,
        )
        return ResolutionOutcome(ResolutionAction.RESOLUTION_FAILED)


def render_admin_alert(record: FailureRecord) -> str:
    """HTML body of the critical failure alert; every value is escaped."""
    rows = [
        ("Error ID", record.id),
        ("Error Category", record.error_category.value),
        ("Error Type", record.error_type),
        ("Notification Type", record.kind),
        ("User Email", record.recipient or "N/A"),
        ("Attempts", record.attempts),
        ("Resolution Action", record.resolution_action or "N/A"),
        ("Resolved", "yes" if record.resolved else "no"),
    ]
    items = "\n".join(
        f"      <li><strong>{label}:</strong> {html.escape(str(value))}</li>"
        for label, value in rows
    )
    return f"""<html>
<body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <div style="background-color: #f8d7da; border: 1px solid #f5c6cb; padding: 20px;">
    <h2 style="color: #721c24;">Critical Notification Service Error</h2>
    <h3>Error Details:</h3>
    <ul>
{items}
    </ul>
    <h3>Error Message:</h3>
    <p style="background-color: #fff; padding: 10px; border-left: 4px solid #dc3545;">
      {html.escape(record.error_message)}
    </p>
    <p><strong>Action Required:</strong> Please investigate this critical error.</p>
    <p style="color: #6c757d; font-size: 12px;">
      This alert was generated automatically by the notification error handler.
    </p>
  </div>
</body>
</html>"""


@dataclass
class ResolutionBatchResult:
    """Outcome of one failure resolution batch."""

    processed: int = 0
    resolved: int = 0
    critical_errors: int = 0
    admin_notified: int = 0
    actions: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed": self.processed,
            "resolved": self.resolved,
            "criticalErrors": self.critical_errors,
            "adminNotified": self.admin_notified,
        }


@dataclass
class ProcessedFailure:
    record: FailureRecord
    outcome: ResolutionOutcome
    critical: bool = False
    admin_notified: bool = False


class FailureResolutionEngine:
    """Process a batch of dead-lettered notification messages.

    Args:
        record_store: Where FailureRecords are written
        email_service: Used for administrator alerts
        settings: Notification pipeline settings
        queue_producer: Used by remediation strategies to re-deliver
    """

    def __init__(
        self,
        record_store: RecordStore,
        email_service: EmailService,
        settings: NotificationSettings,
        queue_producer: Optional[QueueProducer] = None,
    ):
        self._record_store = record_store
        self._email_service = email_service
        self._settings = settings
        self._queue_producer = queue_producer

    def process_batch(
        self, records: Iterable[Dict[str, Any]]
    ) -> ResolutionBatchResult:
        records = list(records or [])
        result = ResolutionBatchResult()
        logger.info("failure_resolution_batch_started", record_count=len(records))

        for record in records:
            message = QueueMessage.from_record(record)
            with bind_request_context(
                correlation_id=message.message_id or None,
                pipeline="failure_resolution",
                receive_count=message.receive_count,
            ):
                try:
                    processed = self.process_message(message)
                except Exception as e:  # pylint: disable=broad-except
                    logger.error(
                        "failed_message_processing_failed",
                        message_id=message.message_id,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    continue

            result.processed += 1
            action = processed.outcome.action.value
            result.actions[action] = result.actions.get(action, 0) + 1
            if processed.outcome.resolved:
                result.resolved += 1
            if processed.critical:
                result.critical_errors += 1
            if processed.admin_notified:
                result.admin_notified += 1

        logger.info("failure_resolution_batch_completed", **result.to_dict())
        return result

    def process_message(self, message: QueueMessage) -> ProcessedFailure:
        try:
            body = parse_body(message.body)
        except MessageStructureError as e:
            logger.error("dead_letter_body_unparsable", error=str(e))
            body = {"type": UNKNOWN_KIND, "data": {}}

        logger.info(
            "processing_failed_message",
            message_id=message.message_id,
            type=body.get("type"),
            receive_count=message.receive_count,
        )

        analysis = analyze_failure(
            body, message.receive_count, self._settings.REPEATED_FAILURE_THRESHOLD
        )
        record = FailureRecord(
            original_notification_id=_notification_id(body),
            kind=str(body["type"]) if body.get("type") else None,
            recipient=extract_recipient(body),
            error_type=analysis.error_type,
            error_category=analysis.category,
            error_message=analysis.error_message,
            error_detail=analysis.error_detail,
            source_message_id=message.message_id or None,
            receive_count=message.receive_count,
            attempts=analysis.attempts,
        )
        self._save(record)

        outcome = attempt_resolution(
            ResolutionContext(
                message=body,
                analysis=analysis,
                settings=self._settings,
                queue_producer=self._queue_producer,
            )
        )
        record.resolution_action = outcome.action.value
        if outcome.resolved:
            record.mark_resolved(AUTOMATIC_RESOLVER)
            self._save(record)
        logger.info(
            "failure_resolution_attempted",
            failure_id=record.id,
            error_category=record.error_category.value,
            action=outcome.action.value,
            resolved=outcome.resolved,
        )

        critical = record.is_critical(self._settings.CRITICAL_ATTEMPTS_THRESHOLD)
        admin_notified = self.notify_admin(record) if critical else False
        return ProcessedFailure(
            record=record,
            outcome=outcome,
            critical=critical,
            admin_notified=admin_notified,
        )

    def notify_admin(self, record: FailureRecord) -> bool:
        """Send the critical failure alert. Returns False when sending failed."""
        subject = (
            "Critical Error in Notification Service - "
            f"{record.error_category.value}"
        )
        try:
            self._email_service.send(
                self._settings.ADMIN_EMAIL, subject, render_admin_alert(record)
            )
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "admin_notification_failed", failure_id=record.id, error=str(e)
            )
            return False

        logger.warning(
            "admin_notified_of_critical_error",
            failure_id=record.id,
            admin_email=self._settings.ADMIN_EMAIL,
        )
        return True

    def _save(self, record: FailureRecord) -> None:
        """Best-effort write; the audit trail is not needed for remediation."""
        try:
            self._record_store.put(
                self._settings.NOTIFICATION_ERRORS_TABLE, record.to_item()
            )
            logger.info("failure_record_saved", failure_id=record.id)
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "failure_record_save_failed", failure_id=record.id, error=str(e)
            )
