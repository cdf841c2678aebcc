"""Fixtures for notification pipeline tests.

In-memory collaborators implement the adapter interfaces so the pipelines
can be exercised end to end without AWS.
"""

from typing import Any, Dict, List, Optional
from uuid import uuid4

import pytest

from infrastructure.configuration import NotificationSettings
from modules.notifications.adapters.base import (
    BlobStore,
    EmailService,
    QueueProducer,
    RecordStore,
)
from modules.notifications.exceptions import (
    DeliveryError,
    PersistenceError,
    RequeueError,
    TemplateFetchError,
)
from modules.notifications.template_cache import TemplateCache, TemplateResolver


class InMemoryRecordStore(RecordStore):
    """Record store keeping every table in a dict, with a write log."""

    def __init__(self):
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.writes: List[tuple] = []
        self.fail_tables: set = set()

    def put(self, table: str, item: Dict[str, Any]) -> Dict[str, Any]:
        if table in self.fail_tables:
            raise PersistenceError(f"{table} unavailable", transient=True)
        stored = dict(item)
        stored.setdefault("id", str(uuid4()))
        self.tables.setdefault(table, {})[stored["id"]] = stored
        self.writes.append((table, stored))
        return stored

    def get(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        return self.tables.get(table, {}).get(record_id)

    def query(self, table: str, **params: Any) -> List[Dict[str, Any]]:
        return [
            item
            for item in self.tables.get(table, {}).values()
            if all(item.get(k) == v for k, v in params.items())
        ]

    def items(self, table: str) -> List[Dict[str, Any]]:
        return list(self.tables.get(table, {}).values())


class FakeEmailService(EmailService):
    def __init__(self):
        self.sent: List[Dict[str, str]] = []
        self.error: Optional[DeliveryError] = None

    def send(self, to: str, subject: str, html_body: str) -> str:
        if self.error is not None:
            raise self.error
        self.sent.append({"to": to, "subject": subject, "html_body": html_body})
        return f"ses-{len(self.sent)}"


class FakeBlobStore(BlobStore):
    def __init__(self, blobs: Optional[Dict[tuple, str]] = None):
        self.blobs = blobs or {}
        self.fetches: List[tuple] = []

    def fetch(self, container: str, name: str) -> str:
        self.fetches.append((container, name))
        if (container, name) not in self.blobs:
            raise TemplateFetchError(f"s3://{container}/{name} not found")
        return self.blobs[(container, name)]


class FakeQueueProducer(QueueProducer):
    def __init__(self):
        self.messages: List[Dict[str, Any]] = []
        self.error: Optional[RequeueError] = None

    def send(self, queue_url: str, body: Dict[str, Any], delay_seconds: int = 0) -> str:
        if self.error is not None:
            raise self.error
        self.messages.append(
            {"queue_url": queue_url, "body": body, "delay_seconds": delay_seconds}
        )
        return f"sqs-{len(self.messages)}"


@pytest.fixture
def notification_settings():
    """Settings with fixed values, independent of the environment."""
    return NotificationSettings(
        NOTIFICATIONS_TABLE="notification-table",
        NOTIFICATION_ERRORS_TABLE="notification-error-table",
        EMAIL_TEMPLATES_BUCKET="templates-email-notification",
        ADMIN_EMAIL="admin@infernobank.com",
        MAX_ATTEMPTS=3,
        CRITICAL_ATTEMPTS_THRESHOLD=5,
        REPEATED_FAILURE_THRESHOLD=3,
        IMMEDIATE_RETRY_MAX_RECEIVE_COUNT=2,
        MAX_REMEDIATIONS=2,
        TIMEZONE="America/Bogota",
        QUEUE_URL=None,
        DLQ_URL=None,
        DELAYED_RETRY_SECONDS=900,
    )


@pytest.fixture
def record_store():
    return InMemoryRecordStore()


@pytest.fixture
def email_service():
    return FakeEmailService()


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def queue_producer():
    return FakeQueueProducer()


@pytest.fixture
def template_cache():
    return TemplateCache()


@pytest.fixture
def template_resolver(blob_store, template_cache, notification_settings):
    return TemplateResolver(
        blob_store=blob_store,
        cache=template_cache,
        container=notification_settings.EMAIL_TEMPLATES_BUCKET,
    )
