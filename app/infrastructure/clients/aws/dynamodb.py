"""DynamoDB client for AWS operations.

Provides access to the DynamoDB operations the record store needs
(get_item, put_item, query) with consistent error handling and
OperationResult return types.
"""

from typing import Any, Dict

import structlog

from infrastructure.clients.aws.executor import execute_aws_api_call
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.operations.result import OperationResult

logger = structlog.get_logger()


class DynamoDBClient:
    """Client for DynamoDB operations.

    Items use the low-level typed attribute format
    (e.g. ``{"id": {"S": "123"}}``).

    Args:
        session_provider: SessionProvider instance for region/endpoint config
    """

    def __init__(self, session_provider: SessionProvider) -> None:
        self._session_provider = session_provider
        self._service_name = "dynamodb"
        self._logger = logger.bind(component="dynamodb_client")

    def get_item(
        self,
        table_name: str,
        Key: Dict[str, Any],
        **kwargs,
    ) -> OperationResult:
        """Get an item from DynamoDB.

        Args:
            table_name: Name of the DynamoDB table
            Key: Primary key of the item (e.g., {"id": {"S": "123"}})
            **kwargs: Additional DynamoDB get_item parameters

        Returns:
            OperationResult with the raw response or error
        """
        return execute_aws_api_call(
            self._service_name,
            "get_item",
            TableName=table_name,
            Key=Key,
            **self._session_provider.build_client_kwargs(),
            **kwargs,
        )

    def put_item(
        self,
        table_name: str,
        Item: Dict[str, Any],
        **kwargs,
    ) -> OperationResult:
        """Put (create or overwrite) an item into DynamoDB."""
        self._logger.debug("dynamodb_put_item_started", table=table_name)
        return execute_aws_api_call(
            self._service_name,
            "put_item",
            TableName=table_name,
            Item=Item,
            **self._session_provider.build_client_kwargs(),
            **kwargs,
        )

    def query(
        self,
        table_name: str,
        **kwargs,
    ) -> OperationResult:
        """Query a DynamoDB table, collecting ``Items`` across all pages.

        Args:
            table_name: Name of the DynamoDB table
            **kwargs: DynamoDB query parameters (KeyConditionExpression, etc.)

        Returns:
            OperationResult with the list of items in data
        """
        return execute_aws_api_call(
            self._service_name,
            "query",
            keys=["Items"],
            force_paginate=True,
            TableName=table_name,
            **self._session_provider.build_client_kwargs(),
            **kwargs,
        )
