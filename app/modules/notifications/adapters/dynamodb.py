"""DynamoDB-backed record store."""

import json
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import uuid4

import structlog
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

from infrastructure.clients.aws.dynamodb import DynamoDBClient
from modules.notifications.adapters.base import RecordStore
from modules.notifications.exceptions import PersistenceError

logger = structlog.get_logger()

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def to_attribute_map(item: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a JSON-compatible mapping into DynamoDB typed attributes.

    Floats go through Decimal, which is the only number type DynamoDB
    accepts.
    """
    normalized = json.loads(json.dumps(item, default=str), parse_float=Decimal)
    return {key: _serializer.serialize(value) for key, value in normalized.items()}


def _plain(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, set)):
        return [_plain(v) for v in value]
    return value


def from_attribute_map(attributes: Dict[str, Any]) -> Dict[str, Any]:
    """Convert DynamoDB typed attributes back into plain Python values."""
    return {
        key: _plain(_deserializer.deserialize(value))
        for key, value in attributes.items()
    }


class DynamoDBRecordStore(RecordStore):
    """Record store writing whole items keyed by ``id``.

    ``put`` is a full overwrite, so repeating a write after a redelivery
    leaves the same item behind.

    Args:
        client: DynamoDBClient from the AWS clients facade
        key_name: Partition key attribute name
    """

    def __init__(self, client: DynamoDBClient, key_name: str = "id") -> None:
        self._client = client
        self._key_name = key_name

    def put(self, table: str, item: Dict[str, Any]) -> Dict[str, Any]:
        stored = dict(item)
        if not stored.get(self._key_name):
            stored[self._key_name] = str(uuid4())

        result = self._client.put_item(table, Item=to_attribute_map(stored))
        if not result.is_success:
            raise PersistenceError(
                f"Failed to save record {stored[self._key_name]} to {table}: "
                f"{result.message}",
                error_code=result.error_code,
                transient=result.is_transient,
            )

        logger.info("record_saved", table=table, record_id=stored[self._key_name])
        return stored

    def get(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        result = self._client.get_item(
            table, Key={self._key_name: {"S": record_id}}
        )
        if not result.is_success:
            raise PersistenceError(
                f"Failed to read record {record_id} from {table}: {result.message}",
                error_code=result.error_code,
                transient=result.is_transient,
            )

        attributes = (result.data or {}).get("Item")
        if not attributes:
            return None
        return from_attribute_map(attributes)

    def query(self, table: str, **params: Any) -> List[Dict[str, Any]]:
        result = self._client.query(table, **params)
        if not result.is_success:
            raise PersistenceError(
                f"Failed to query {table}: {result.message}",
                error_code=result.error_code,
                transient=result.is_transient,
            )

        raw_items = result.data or []
        if isinstance(raw_items, dict):
            # Single unpaginated response
            raw_items = raw_items.get("Items", [])
        items = [from_attribute_map(item) for item in raw_items]
        logger.debug("records_queried", table=table, item_count=len(items))
        return items
