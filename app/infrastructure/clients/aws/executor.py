"""Base AWS client utilities for infrastructure clients.

Provides `get_boto3_client` and `execute_aws_api_call` with the
OperationResult pattern. This module avoids reading settings at import
time and accepts configuration via parameters.
"""

import time
from typing import Any, Dict, List, Optional

import boto3  # type: ignore
from botocore.client import BaseClient  # type: ignore
from botocore.exceptions import BotoCoreError, ClientError  # type: ignore
import structlog

from infrastructure.operations.classifiers import classify_aws_error
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

logger = structlog.get_logger()


def get_boto3_client(
    service_name: str,
    session_config: Optional[Dict[str, Any]] = None,
    client_config: Optional[Dict[str, Any]] = None,
) -> BaseClient:
    """Create a boto3 client for the given service.

    Args:
        service_name: AWS service name (e.g., 'dynamodb', 'ses')
        session_config: Optional boto3 session kwargs (e.g., region_name)
        client_config: Optional client kwargs (e.g., endpoint_url)

    Returns:
        botocore client instance
    """
    session = boto3.Session(**(session_config or {}))
    return session.client(service_name, **(client_config or {}))


def _calculate_retry_delay(attempt: int, backoff_factor: float = 0.5) -> float:
    return backoff_factor * (2**attempt)


def _call_api_once(
    service_name: str,
    method: str,
    keys: Optional[List[str]],
    session_config: Optional[Dict[str, Any]],
    client_config: Optional[Dict[str, Any]],
    force_paginate: bool,
    kwargs: Dict[str, Any],
) -> Any:
    client = get_boto3_client(
        service_name,
        session_config=session_config,
        client_config=client_config,
    )

    if force_paginate and client.can_paginate(method):
        paginator = client.get_paginator(method)
        results: List[Any] = []
        for page in paginator.paginate(**kwargs):
            for k in keys or []:
                if isinstance(page.get(k), list):
                    results.extend(page[k])
        return results

    return getattr(client, method)(**kwargs)


def execute_aws_api_call(
    service_name: str,
    method: str,
    keys: Optional[List[str]] = None,
    session_config: Optional[Dict[str, Any]] = None,
    client_config: Optional[Dict[str, Any]] = None,
    max_retries: int = 2,
    force_paginate: bool = False,
    backoff_factor: float = 0.5,
    **kwargs,
) -> OperationResult:
    """Execute an AWS API call and wrap the outcome in an OperationResult.

    Throttling and other transient errors are retried in-call with
    exponential backoff; anything else is returned immediately.

    Args mirror `boto3` call parameters; `keys` selects the list fields
    collected across pages when `force_paginate` is set.
    """

    mapped: Optional[OperationResult] = None

    for attempt in range(max_retries + 1):
        try:
            result = _call_api_once(
                service_name,
                method,
                keys,
                session_config,
                client_config,
                force_paginate,
                kwargs,
            )
            return OperationResult.success(
                data=result, message=f"{service_name}.{method} succeeded"
            )

        except ClientError as e:
            mapped = classify_aws_error(e)

            if (
                mapped.status == OperationStatus.TRANSIENT_ERROR
                and attempt < max_retries
            ):
                delay = _calculate_retry_delay(attempt, backoff_factor)
                logger.warning(
                    "aws_api_retry",
                    service=service_name,
                    method=method,
                    attempt=attempt + 1,
                    error=str(e),
                    delay=delay,
                )
                time.sleep(delay)
                continue

            logger.error(
                "aws_api_error_final",
                service=service_name,
                method=method,
                error=str(e),
                error_code=mapped.error_code,
            )
            return mapped

        except BotoCoreError as e:
            logger.error(
                "aws_api_connection_error",
                service=service_name,
                method=method,
                error=str(e),
            )
            return classify_aws_error(e)

        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "aws_api_unexpected_error",
                service=service_name,
                method=method,
                error=str(e),
            )
            return OperationResult.permanent_error(message=str(e))

    return mapped or OperationResult.permanent_error(message="unknown_error")
