"""Collaborator interfaces consumed by the notification pipelines.

The pipelines only talk to these abstractions; AWS-backed implementations
live next to this module and are wired in ``modules.notifications.providers``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class RecordStore(ABC):
    """Durable key-value store for notification and failure records."""

    @abstractmethod
    def put(self, table: str, item: Dict[str, Any]) -> Dict[str, Any]:
        """Persist or overwrite a record by its ``id``.

        An ``id`` is assigned when the item has none.

        Returns:
            The stored item

        Raises:
            PersistenceError: when the store cannot be written
        """
        pass

    @abstractmethod
    def get(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Fetch one record by id, or None when absent.

        Raises:
            PersistenceError: when the store cannot be read
        """
        pass

    @abstractmethod
    def query(self, table: str, **params: Any) -> List[Dict[str, Any]]:
        """Run a filtered query and return every matching record.

        Raises:
            PersistenceError: when the store cannot be read
        """
        pass


class EmailService(ABC):
    """Outbound email delivery, one attempt per call."""

    @abstractmethod
    def send(self, to: str, subject: str, html_body: str) -> str:
        """Attempt one delivery.

        Returns:
            Provider-assigned message id

        Raises:
            DeliveryError: when the message is rejected or not accepted
        """
        pass


class BlobStore(ABC):
    """Read-only store of named text bodies."""

    @abstractmethod
    def fetch(self, container: str, name: str) -> str:
        """Return the body stored under ``container/name``.

        Raises:
            TemplateFetchError: when the body is absent or unreachable
        """
        pass


class QueueProducer(ABC):
    """Sends messages to a queue (re-delivery, dead-letter forwarding)."""

    @abstractmethod
    def send(self, queue_url: str, body: Dict[str, Any], delay_seconds: int = 0) -> str:
        """Serialize and enqueue ``body``.

        Returns:
            Queue-assigned message id

        Raises:
            RequeueError: when the queue does not accept the message
        """
        pass
