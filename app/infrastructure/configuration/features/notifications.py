"""Notification pipeline feature settings."""

from typing import Optional

from pydantic import Field

from infrastructure.configuration.base import FeatureSettings


class NotificationSettings(FeatureSettings):
    """Configuration for the dispatch and failure resolution pipelines.

    Environment Variables:
        NOTIFICATIONS_TABLE: Table holding Notification records
        NOTIFICATION_ERRORS_TABLE: Table holding FailureRecords
        EMAIL_TEMPLATES_BUCKET: Bucket holding HTML templates
        EMAIL_FROM_ADDRESS: Sender address for all outgoing mail
        EMAIL_FROM_NAME: Sender display name
        ADMIN_EMAIL: Recipient of critical failure alerts
        NOTIFICATION_MAX_ATTEMPTS: Deliveries before a failure becomes FAILED
        CRITICAL_ATTEMPTS_THRESHOLD: Attempts at which a failure is critical
        REPEATED_FAILURE_THRESHOLD: Receive count above which a dead-lettered
            message is classified as a repeated failure
        IMMEDIATE_RETRY_MAX_RECEIVE_COUNT: Highest receive count eligible for
            an immediate retry of a temporary service error
        NOTIFICATION_MAX_REMEDIATIONS: Automatic re-deliveries of one message
            before it is left for manual investigation
        NOTIFICATIONS_TIMEZONE: Timezone for the rendered generation date
        NOTIFICATIONS_QUEUE_URL: Main queue, target of remediation re-delivery
        NOTIFICATIONS_DLQ_URL: Dead-letter queue for terminal dispatch failures
        DELAYED_RETRY_SECONDS: Delay used for rate-limited retries (max 900)

    Example:
        ```python
        from infrastructure.services.providers import get_settings

        settings = get_settings()

        table = settings.notifications.NOTIFICATIONS_TABLE
        ```
    """

    NOTIFICATIONS_TABLE: str = Field(
        default="notification-table", alias="NOTIFICATIONS_TABLE"
    )
    NOTIFICATION_ERRORS_TABLE: str = Field(
        default="notification-error-table", alias="NOTIFICATION_ERRORS_TABLE"
    )
    EMAIL_TEMPLATES_BUCKET: str = Field(
        default="templates-email-notification", alias="EMAIL_TEMPLATES_BUCKET"
    )
    EMAIL_FROM_ADDRESS: str = Field(
        default="no-reply@infernobank.com", alias="EMAIL_FROM_ADDRESS"
    )
    EMAIL_FROM_NAME: str = Field(default="Inferno Bank", alias="EMAIL_FROM_NAME")
    ADMIN_EMAIL: str = Field(default="admin@infernobank.com", alias="ADMIN_EMAIL")

    MAX_ATTEMPTS: int = Field(default=3, ge=1, alias="NOTIFICATION_MAX_ATTEMPTS")
    CRITICAL_ATTEMPTS_THRESHOLD: int = Field(
        default=5, ge=1, alias="CRITICAL_ATTEMPTS_THRESHOLD"
    )
    REPEATED_FAILURE_THRESHOLD: int = Field(
        default=3, ge=0, alias="REPEATED_FAILURE_THRESHOLD"
    )
    IMMEDIATE_RETRY_MAX_RECEIVE_COUNT: int = Field(
        default=2, ge=0, alias="IMMEDIATE_RETRY_MAX_RECEIVE_COUNT"
    )
    MAX_REMEDIATIONS: int = Field(
        default=2, ge=0, alias="NOTIFICATION_MAX_REMEDIATIONS"
    )

    TIMEZONE: str = Field(default="America/Bogota", alias="NOTIFICATIONS_TIMEZONE")

    QUEUE_URL: Optional[str] = Field(default=None, alias="NOTIFICATIONS_QUEUE_URL")
    DLQ_URL: Optional[str] = Field(default=None, alias="NOTIFICATIONS_DLQ_URL")
    DELAYED_RETRY_SECONDS: int = Field(
        default=900, ge=0, le=900, alias="DELAYED_RETRY_SECONDS"
    )

    @property
    def email_source(self) -> str:
        """Formatted SES ``Source`` value."""
        return f"{self.EMAIL_FROM_NAME} <{self.EMAIL_FROM_ADDRESS}>"
