"""Test data factories for deterministic test data generation."""

from tests.factories.notifications import (
    make_failure_record,
    make_message_body,
    make_notification,
    make_sqs_record,
)

__all__ = [
    "make_failure_record",
    "make_message_body",
    "make_notification",
    "make_sqs_record",
]
