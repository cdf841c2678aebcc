"""Infrastructure modules for the notification service.

Centralized infrastructure components:
- configuration: Settings management (Settings, AwsSettings, NotificationSettings)
- logging: Structured logging setup and request context binding
- operations: Operation results and AWS error classification
- clients: AWS service clients (DynamoDB, SES, S3, SQS)
- services: Process-scoped providers (get_settings, get_aws_clients)
"""
