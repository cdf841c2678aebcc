"""Process-scoped wiring of the notification pipelines.

Each provider is cached for the life of the process, so a warm Lambda
container keeps its template cache and boto3 client configuration across
invocations. Tests call ``cache_clear()`` on the providers they touch.
"""

from functools import lru_cache

from infrastructure.services import get_aws_clients, get_settings
from modules.notifications.adapters import (
    DynamoDBRecordStore,
    S3BlobStore,
    SESEmailService,
    SQSQueueProducer,
)
from modules.notifications.dispatch import DispatchProcessor
from modules.notifications.resolution import FailureResolutionEngine
from modules.notifications.template_cache import TemplateCache, TemplateResolver


@lru_cache
def get_template_cache() -> TemplateCache:
    return TemplateCache()


@lru_cache
def get_record_store() -> DynamoDBRecordStore:
    return DynamoDBRecordStore(get_aws_clients().dynamodb)


@lru_cache
def get_email_service() -> SESEmailService:
    settings = get_settings()
    return SESEmailService(
        get_aws_clients().ses, source=settings.notifications.email_source
    )


@lru_cache
def get_queue_producer() -> SQSQueueProducer:
    return SQSQueueProducer(get_aws_clients().sqs)


@lru_cache
def get_dispatch_processor() -> DispatchProcessor:
    """Dispatch Processor backed by DynamoDB, SES, S3 and SQS."""
    settings = get_settings().notifications
    resolver = TemplateResolver(
        blob_store=S3BlobStore(get_aws_clients().s3),
        cache=get_template_cache(),
        container=settings.EMAIL_TEMPLATES_BUCKET,
    )
    return DispatchProcessor(
        record_store=get_record_store(),
        email_service=get_email_service(),
        template_resolver=resolver,
        settings=settings,
        queue_producer=get_queue_producer(),
    )


@lru_cache
def get_resolution_engine() -> FailureResolutionEngine:
    """Failure Resolution Engine backed by DynamoDB, SES and SQS."""
    return FailureResolutionEngine(
        record_store=get_record_store(),
        email_service=get_email_service(),
        settings=get_settings().notifications,
        queue_producer=get_queue_producer(),
    )
