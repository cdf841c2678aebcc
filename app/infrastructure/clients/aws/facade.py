"""AWS Clients facade for the notification pipelines.

Composition-based design: each service has a focused client class, composed
together in a lightweight facade sharing one SessionProvider.
"""

import structlog

from infrastructure.clients.aws.dynamodb import DynamoDBClient
from infrastructure.clients.aws.s3 import S3Client
from infrastructure.clients.aws.ses import SESClient
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.clients.aws.sqs import SQSClient
from infrastructure.configuration.integrations.aws import AwsSettings

logger = structlog.get_logger()


class AWSClients:
    """Facade for all AWS service clients.

    Args:
        aws_settings: AWS configuration from settings.aws

    Usage:
        aws = AWSClients(settings.aws)
        result = aws.dynamodb.get_item("notification-table", {"id": {"S": "1"}})
    """

    def __init__(self, aws_settings: AwsSettings) -> None:
        self._session_provider = SessionProvider(
            region=aws_settings.AWS_REGION,
            endpoint_url=aws_settings.ENDPOINT_URL,
        )

        self.dynamodb: DynamoDBClient = DynamoDBClient(self._session_provider)
        self.ses: SESClient = SESClient(self._session_provider)
        self.s3: S3Client = S3Client(self._session_provider)
        self.sqs: SQSClient = SQSClient(self._session_provider)

        logger.debug(
            "aws_clients_initialized",
            region=aws_settings.AWS_REGION,
            endpoint_url=aws_settings.ENDPOINT_URL,
        )

    @property
    def session_provider(self) -> SessionProvider:
        return self._session_provider
