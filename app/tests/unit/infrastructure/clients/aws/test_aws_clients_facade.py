"""Tests for the AWSClients facade and SessionProvider."""

import pytest

from infrastructure.clients.aws import (
    AWSClients,
    DynamoDBClient,
    S3Client,
    SESClient,
    SQSClient,
    SessionProvider,
)


@pytest.mark.unit
class TestAWSClientsFacade:
    def test_composes_service_clients(self, aws_factory):
        assert isinstance(aws_factory.dynamodb, DynamoDBClient)
        assert isinstance(aws_factory.ses, SESClient)
        assert isinstance(aws_factory.s3, S3Client)
        assert isinstance(aws_factory.sqs, SQSClient)

    def test_clients_share_session_provider(self, aws_factory):
        provider = aws_factory.session_provider
        assert aws_factory.dynamodb._session_provider is provider
        assert aws_factory.ses._session_provider is provider
        assert aws_factory.sqs._session_provider is provider

    def test_endpoint_url_is_passed_to_session_provider(self, mock_aws_settings):
        mock_aws_settings.ENDPOINT_URL = "http://localhost:4566"

        clients = AWSClients(aws_settings=mock_aws_settings)

        assert clients.session_provider.endpoint_url == "http://localhost:4566"
        assert clients.session_provider.region == "us-east-1"


@pytest.mark.unit
class TestSessionProvider:
    def test_build_client_kwargs_with_region(self):
        kwargs = SessionProvider(region="us-east-1").build_client_kwargs()

        assert kwargs == {
            "session_config": {"region_name": "us-east-1"},
            "client_config": {"region_name": "us-east-1"},
        }

    def test_build_client_kwargs_with_endpoint(self):
        kwargs = SessionProvider(
            region="us-east-1", endpoint_url="http://localhost:4566"
        ).build_client_kwargs()

        assert kwargs["client_config"]["endpoint_url"] == "http://localhost:4566"

    def test_build_client_kwargs_empty(self):
        kwargs = SessionProvider().build_client_kwargs()

        assert kwargs == {"session_config": None, "client_config": None}
