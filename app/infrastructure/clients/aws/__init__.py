"""Infrastructure AWS clients public API.

The main facade is AWSClients, which composes per-service clients (DynamoDB,
SES, S3, SQS) and exposes them as attributes:

    from infrastructure.services.providers import get_aws_clients

    aws = get_aws_clients()
    result = aws.ses.send_email(source, ["user@example.com"], subject, html)
    if result.is_success:
        message_id = result.data["MessageId"]
"""

from infrastructure.clients.aws.dynamodb import DynamoDBClient
from infrastructure.clients.aws.facade import AWSClients
from infrastructure.clients.aws.s3 import S3Client
from infrastructure.clients.aws.ses import SESClient
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.clients.aws.sqs import SQSClient

__all__ = [
    "AWSClients",
    "SessionProvider",
    "DynamoDBClient",
    "SESClient",
    "S3Client",
    "SQSClient",
]
