"""Infrastructure configuration module - public API.

Centralized configuration management for the notification service using
Pydantic BaseSettings with domain-based organization.

Exports:
    Settings: Main settings class (for testing/overrides)
    AwsSettings: AWS integration settings
    NotificationSettings: Notification pipeline settings

Example:
    ```python
    from infrastructure.services.providers import get_settings

    settings = get_settings()

    aws_region = settings.aws.AWS_REGION
    errors_table = settings.notifications.NOTIFICATION_ERRORS_TABLE
    ```
"""

from infrastructure.configuration.settings import Settings
from infrastructure.configuration.integrations import AwsSettings
from infrastructure.configuration.features import NotificationSettings

__all__ = ["Settings", "AwsSettings", "NotificationSettings"]
