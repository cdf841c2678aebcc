"""Tests for DynamoDBClient."""

import pytest
from infrastructure.clients.aws.dynamodb import DynamoDBClient
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.operations.status import OperationStatus


@pytest.mark.unit
class TestDynamoDBClient:
    """Test suite for DynamoDBClient."""

    def test_init(self, session_provider):
        client = DynamoDBClient(session_provider=session_provider)
        assert client._service_name == "dynamodb"

    def test_get_item(self, session_provider, make_fake_client, use_fake_client):
        fake = use_fake_client(
            make_fake_client(api_responses={"get_item": {"Item": {"id": {"S": "1"}}}})
        )
        client = DynamoDBClient(session_provider=session_provider)

        result = client.get_item("notification-table", {"id": {"S": "1"}})

        assert result.is_success
        assert result.data == {"Item": {"id": {"S": "1"}}}
        assert fake.calls == [
            (
                "get_item",
                {"TableName": "notification-table", "Key": {"id": {"S": "1"}}},
            )
        ]

    def test_put_item(self, session_provider, make_fake_client, use_fake_client):
        fake = use_fake_client(make_fake_client(api_responses={"put_item": {}}))
        client = DynamoDBClient(session_provider=session_provider)

        result = client.put_item("notification-table", {"id": {"S": "1"}})

        assert result.is_success
        method, kwargs = fake.calls[0]
        assert method == "put_item"
        assert kwargs["Item"] == {"id": {"S": "1"}}

    def test_put_item_missing_table_is_not_found(
        self, session_provider, make_fake_client, use_fake_client
    ):
        from botocore.exceptions import ClientError

        error = ClientError(
            {"Error": {"Code": "ResourceNotFoundException", "Message": "no table"}},
            "PutItem",
        )
        use_fake_client(make_fake_client(api_responses={"put_item": error}))
        client = DynamoDBClient(session_provider=session_provider)

        result = client.put_item("missing", {"id": {"S": "1"}})

        assert result.status == OperationStatus.NOT_FOUND

    def test_query_collects_items_across_pages(
        self, make_fake_client, use_fake_client
    ):
        use_fake_client(
            make_fake_client(
                paginated_pages=[
                    {"Items": [{"id": {"S": "1"}}]},
                    {"Items": [{"id": {"S": "2"}}]},
                ]
            )
        )
        client = DynamoDBClient(SessionProvider(region="us-east-1"))

        result = client.query(
            "notification-error-table",
            KeyConditionExpression="id = :id",
        )

        assert result.is_success
        assert result.data == [{"id": {"S": "1"}}, {"id": {"S": "2"}}]
