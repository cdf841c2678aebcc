"""Collaborator interfaces and their AWS implementations."""

from modules.notifications.adapters.base import (
    BlobStore,
    EmailService,
    QueueProducer,
    RecordStore,
)
from modules.notifications.adapters.dynamodb import DynamoDBRecordStore
from modules.notifications.adapters.s3 import S3BlobStore
from modules.notifications.adapters.ses import SESEmailService
from modules.notifications.adapters.sqs import SQSQueueProducer

__all__ = [
    "RecordStore",
    "EmailService",
    "BlobStore",
    "QueueProducer",
    "DynamoDBRecordStore",
    "SESEmailService",
    "S3BlobStore",
    "SQSQueueProducer",
]
