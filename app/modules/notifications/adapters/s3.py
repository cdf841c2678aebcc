"""S3-backed blob store."""

import structlog

from infrastructure.clients.aws.s3 import S3Client
from modules.notifications.adapters.base import BlobStore
from modules.notifications.exceptions import TemplateFetchError

logger = structlog.get_logger()


class S3BlobStore(BlobStore):
    """Blob store reading UTF-8 objects from S3 buckets."""

    def __init__(self, client: S3Client) -> None:
        self._client = client

    def fetch(self, container: str, name: str) -> str:
        result = self._client.get_object_text(container, name)
        if not result.is_success:
            raise TemplateFetchError(
                f"Failed to fetch s3://{container}/{name}: {result.message}",
                error_code=result.error_code,
                transient=result.is_transient,
            )
        logger.debug("blob_fetched", container=container, name=name)
        return result.data
