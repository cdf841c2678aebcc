"""Session provider for AWS client operations.

Centralizes region and endpoint configuration for all AWS service clients
so per-service clients don't duplicate it.
"""

from typing import Any, Dict, Optional

import structlog

logger = structlog.get_logger()


class SessionProvider:
    """Provider for AWS session and client configuration.

    Args:
        region: AWS region for all clients (e.g., 'us-east-1')
        endpoint_url: Custom endpoint URL (for testing/LocalStack)
    """

    def __init__(
        self,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ) -> None:
        self.region = region
        self.endpoint_url = endpoint_url

    def build_client_kwargs(self) -> Dict[str, Any]:
        """Build session and client configuration kwargs for boto3.

        Returns:
            Dict with session_config and client_config for passing to
            execute_aws_api_call
        """
        session_config = {}
        client_config = {}

        if self.region:
            session_config["region_name"] = self.region
            client_config["region_name"] = self.region

        if self.endpoint_url:
            client_config["endpoint_url"] = self.endpoint_url

        logger.debug(
            "built_client_kwargs",
            session_config=session_config,
            client_config=client_config,
        )
        return {
            "session_config": session_config or None,
            "client_config": client_config or None,
        }
