"""Lambda entrypoints for the notification pipelines.

- ``send_notifications``: triggered by the notifications queue.
- ``process_failed_notifications``: triggered by its dead-letter queue.
"""

import json

from dotenv import load_dotenv

from infrastructure.logging import clear_request_context, get_module_logger
from infrastructure.services import get_settings
from modules.notifications.providers import (
    get_dispatch_processor,
    get_resolution_engine,
)

load_dotenv()

logger = get_module_logger()


def send_notifications(event, context):
    """Process a batch of notification events.

    Messages left in RETRY are returned as ``batchItemFailures`` so the
    queue redelivers only those.
    """
    records = (event or {}).get("Records") or []
    logger.info(
        "send_notifications_invoked",
        record_count=len(records),
        request_id=getattr(context, "aws_request_id", None),
    )
    try:
        result = get_dispatch_processor().process_batch(records)
    finally:
        clear_request_context()

    response = {
        "statusCode": 200,
        "body": json.dumps(
            {"message": "Notifications processed", "results": result.to_dict()}
        ),
    }
    response.update(result.to_batch_response())
    return response


def process_failed_notifications(event, context):
    """Classify, remediate and escalate a batch of dead-lettered messages."""
    records = (event or {}).get("Records") or []
    logger.info(
        "process_failed_notifications_invoked",
        record_count=len(records),
        request_id=getattr(context, "aws_request_id", None),
    )
    try:
        result = get_resolution_engine().process_batch(records)
    finally:
        clear_request_context()

    return {
        "statusCode": 200,
        "body": json.dumps(
            {"message": "Error processing completed", "results": result.to_dict()}
        ),
    }


def list_configs():
    """Log the configuration sections loaded for this container."""
    settings = get_settings()
    config_settings = {"settings": []}

    for key, value in settings.model_dump().items():
        if isinstance(value, dict):
            config_settings[key] = list(value.keys())
        else:
            config_settings["settings"].append({key: value})

    logger.info("configuration_initialized", base_settings=config_settings["settings"])
    for key, value in config_settings.items():
        if key != "settings":
            logger.info("configuration_loaded", config_setting=key, keys=value)


# Cold start
list_configs()
