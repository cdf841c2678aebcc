"""
Factory functions for dependency injection.

Provides process-scoped singleton providers for core infrastructure services.
A Lambda container reuses these across invocations.
"""

from functools import lru_cache

from infrastructure.configuration import Settings
from infrastructure.clients.aws import AWSClients


@lru_cache
def get_settings() -> Settings:
    """
    Get process-scoped settings singleton.

    This is the single source of truth for settings across the application.
    The @lru_cache decorator ensures only ONE instance is created per process.

        from infrastructure.services.providers import get_settings
        settings = get_settings()

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_aws_clients() -> AWSClients:
    """Provider for the AWS clients facade.

    Boto3 sessions are created per API call, so caching this facade is safe;
    it doesn't hold stale credentials.

    Returns:
        AWSClients: Configured facade for DynamoDB, SES, S3 and SQS calls
    """
    settings = get_settings()
    return AWSClients(aws_settings=settings.aws)
