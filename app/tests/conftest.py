import sys
from pathlib import Path

# Ensure the application package root is on sys.path so importing application
# modules (e.g. `infrastructure.configuration`) works during pytest
# collection, whatever directory pytest is invoked from.
project_root = str(Path(__file__).resolve().parents[1])
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import pytest  # noqa: E402
import structlog  # noqa: E402

from infrastructure.services import get_aws_clients, get_settings  # noqa: E402
from tests.factories.notifications import (  # noqa: E402
    make_failure_record,
    make_message_body,
    make_notification,
    make_sqs_record,
)


@pytest.fixture(autouse=True)
def clear_logging_context():
    """Drop any structlog context left behind by a test."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def reset_providers():
    """Clear cached process-scoped providers before and after a test."""
    get_settings.cache_clear()
    get_aws_clients.cache_clear()
    yield
    get_settings.cache_clear()
    get_aws_clients.cache_clear()


@pytest.fixture
def notification_factory():
    """Factory fixture returning valid PENDING notifications."""
    return make_notification


@pytest.fixture
def failure_record_factory():
    return make_failure_record


@pytest.fixture
def message_body_factory():
    return make_message_body


@pytest.fixture
def sqs_record_factory():
    """Factory fixture building SQS Lambda event records."""
    return make_sqs_record
