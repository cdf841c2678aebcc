"""Message context binding for structured logging.

Binds per-message context (correlation id, queue message id, pipeline) so
every log line emitted while one queue record is processed can be joined
back together.

Usage:
    from infrastructure.logging import bind_request_context

    with bind_request_context(correlation_id=record["messageId"], pipeline="dispatch"):
        logger.info("processing_notification_message")

Dependencies:
    - structlog.contextvars
"""

import uuid
from contextlib import contextmanager
from typing import Optional, Any, Generator
import structlog


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    pipeline: Optional[str] = None,
    receive_count: Optional[int] = None,
    **extra_context: Any,
) -> Generator[None, None, None]:
    """Bind message-scoped context to all logs within the context manager.

    Args:
        correlation_id: Unique identifier (the queue message id). Generated
            when not provided.
        pipeline: Name of the pipeline processing the message.
        receive_count: Approximate receive count reported by the queue.
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        None - context is bound to structlog's context vars for the block.

    Example:
        for record in event["Records"]:
            with bind_request_context(
                correlation_id=record.get("messageId"),
                pipeline="failure_resolution",
            ):
                engine.process_message(record)
    """
    context: dict[str, Any] = {}

    context["correlation_id"] = correlation_id or str(uuid.uuid4())

    if pipeline is not None:
        context["pipeline"] = pipeline

    if receive_count is not None:
        context["receive_count"] = receive_count

    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from the logging context.

    Returns:
        The correlation ID if set, None otherwise.
    """
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("correlation_id")


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID in the current logging context."""
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_request_context() -> None:
    """Clear all message-scoped context from the logging context.

    Called at the end of each Lambda invocation so a warm container does
    not leak context into the next batch.
    """
    structlog.contextvars.clear_contextvars()
