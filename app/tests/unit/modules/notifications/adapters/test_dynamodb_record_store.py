"""Unit tests for DynamoDBRecordStore and the attribute conversions."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from infrastructure.operations.result import OperationResult
from modules.notifications.adapters.dynamodb import (
    DynamoDBRecordStore,
    from_attribute_map,
    to_attribute_map,
)
from modules.notifications.exceptions import PersistenceError


@pytest.fixture
def dynamodb_client():
    client = MagicMock()
    client.put_item.return_value = OperationResult.success(data={})
    return client


@pytest.fixture
def store(dynamodb_client):
    return DynamoDBRecordStore(dynamodb_client)


@pytest.mark.unit
class TestAttributeConversion:
    def test_floats_become_numbers(self):
        attributes = to_attribute_map({"amount": 12.5, "attempts": 2})

        assert attributes["amount"] == {"N": "12.5"}
        assert attributes["attempts"] == {"N": "2"}

    def test_booleans_and_nulls(self):
        attributes = to_attribute_map({"resolved": False, "resolved_at": None})

        assert attributes["resolved"] == {"BOOL": False}
        assert attributes["resolved_at"] == {"NULL": True}

    def test_nested_payload(self):
        attributes = to_attribute_map({"payload": {"fullName": "Ana", "amount": 1.5}})

        assert attributes["payload"]["M"]["fullName"] == {"S": "Ana"}
        assert attributes["payload"]["M"]["amount"] == {"N": "1.5"}

    def test_numbers_come_back_as_plain_values(self):
        item = from_attribute_map(
            {
                "attempts": {"N": "3"},
                "amount": {"N": "12.5"},
                "payload": {"M": {"values": {"L": [{"N": "1"}]}}},
            }
        )

        assert item == {"attempts": 3, "amount": 12.5, "payload": {"values": [1]}}
        assert not isinstance(item["attempts"], Decimal)


@pytest.mark.unit
class TestPut:
    def test_writes_typed_item(self, store, dynamodb_client, notification_factory):
        notification = notification_factory()

        stored = store.put("notification-table", notification.to_item())

        assert stored["id"] == notification.id
        args, kwargs = dynamodb_client.put_item.call_args
        assert args == ("notification-table",)
        assert kwargs["Item"]["id"] == {"S": notification.id}
        assert kwargs["Item"]["status"] == {"S": "PENDING"}

    def test_assigns_id_when_missing(self, store):
        stored = store.put("notification-error-table", {"error_type": "X"})

        assert stored["id"]

    def test_transient_failure(self, store, dynamodb_client):
        dynamodb_client.put_item.return_value = OperationResult.transient_error(
            "throughput exceeded", error_code="ProvisionedThroughputExceededException"
        )

        with pytest.raises(PersistenceError) as exc_info:
            store.put("notification-table", {"id": "n-1"})

        assert exc_info.value.transient is True
        assert exc_info.value.error_code == "ProvisionedThroughputExceededException"

    def test_permanent_failure(self, store, dynamodb_client):
        dynamodb_client.put_item.return_value = OperationResult.permanent_error(
            "no such table", error_code="ResourceNotFoundException"
        )

        with pytest.raises(PersistenceError) as exc_info:
            store.put("missing-table", {"id": "n-1"})

        assert exc_info.value.transient is False
        assert "missing-table" in str(exc_info.value)


@pytest.mark.unit
class TestGetAndQuery:
    def test_get_existing(self, store, dynamodb_client):
        dynamodb_client.get_item.return_value = OperationResult.success(
            data={"Item": {"id": {"S": "n-1"}, "attempts": {"N": "0"}}}
        )

        item = store.get("notification-table", "n-1")

        assert item == {"id": "n-1", "attempts": 0}
        dynamodb_client.get_item.assert_called_once_with(
            "notification-table", Key={"id": {"S": "n-1"}}
        )

    def test_get_missing(self, store, dynamodb_client):
        dynamodb_client.get_item.return_value = OperationResult.success(data={})

        assert store.get("notification-table", "n-1") is None

    def test_get_failure(self, store, dynamodb_client):
        dynamodb_client.get_item.return_value = OperationResult.permanent_error(
            "denied", error_code="AccessDeniedException"
        )

        with pytest.raises(PersistenceError):
            store.get("notification-table", "n-1")

    def test_query_paginated_items(self, store, dynamodb_client):
        dynamodb_client.query.return_value = OperationResult.success(
            data=[{"id": {"S": "a"}}, {"id": {"S": "b"}}]
        )

        items = store.query("notification-error-table", IndexName="by-category")

        assert [item["id"] for item in items] == ["a", "b"]
        dynamodb_client.query.assert_called_once_with(
            "notification-error-table", IndexName="by-category"
        )

    def test_query_single_response(self, store, dynamodb_client):
        dynamodb_client.query.return_value = OperationResult.success(
            data={"Items": [{"id": {"S": "a"}}]}
        )

        assert store.query("notification-error-table") == [{"id": "a"}]

    def test_query_failure(self, store, dynamodb_client):
        dynamodb_client.query.return_value = OperationResult.transient_error("slow")

        with pytest.raises(PersistenceError):
            store.query("notification-error-table")
