"""Structlog configuration for the Lambda entrypoints.

Production output is one JSON object per line on stdout so CloudWatch Logs
Insights can filter on event fields; any other environment gets the
structlog console renderer. Under pytest everything is silenced.

Usage:
    from infrastructure.logging import get_module_logger

    logger = get_module_logger()
    logger.info("notification_sent", notification_id=notification.id)

Dependencies:
    - infrastructure.services.providers.get_settings
"""

import inspect
import logging
import sys
from types import ModuleType
from typing import Any, List, Optional

import structlog
from structlog.stdlib import BoundLogger

from infrastructure.logging.formatters import (
    add_app_info,
    mask_recipients,
    mask_sensitive_data,
    truncate_large_values,
)
from infrastructure.services.providers import get_settings

APP_NAME = "notification-pipeline"

SILENT_LEVEL = logging.CRITICAL + 1


def _is_test_environment() -> bool:
    return "pytest" in sys.modules


def _build_processors(settings: Any, prod_mode: bool) -> List[Any]:
    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ),
        add_app_info(APP_NAME, settings.GIT_SHA),
        mask_sensitive_data(),
        mask_recipients(),
        truncate_large_values(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if prod_mode:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def _route_stdlib_to_stdout(level: int) -> None:
    # The Lambda runtime installs its own root handler before our code runs,
    # so basicConfig only takes effect with force=True.
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
        force=True,
    )
    # boto3 debug output would otherwise bury the pipeline events
    for noisy in ("botocore", "boto3", "urllib3"):
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))


def configure_logging(
    log_level: Optional[str] = None,
    is_production: Optional[bool] = None,
) -> BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Overrides ``settings.LOG_LEVEL``.
        is_production: Overrides ``settings.is_production``; selects JSON
            rather than console rendering.

    Returns:
        The process-wide bound logger.
    """
    if _is_test_environment():
        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(format="%(message)s", level=SILENT_LEVEL, force=True)
        logging.root.setLevel(SILENT_LEVEL)
        return structlog.stdlib.get_logger()

    settings = get_settings()
    prod_mode = settings.is_production if is_production is None else is_production
    level_name = (log_level or settings.LOG_LEVEL).upper()

    structlog.configure(
        processors=_build_processors(settings, prod_mode),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _route_stdlib_to_stdout(getattr(logging, level_name, logging.INFO))

    return structlog.stdlib.get_logger()


# Configured once per container, on first import
logger: BoundLogger = configure_logging()


def _calling_module() -> Optional[ModuleType]:
    frame = inspect.currentframe()
    # Skip this helper and the public function that called it
    for _ in range(2):
        if frame is None:
            return None
        frame = frame.f_back
    if frame is None:
        return None
    return inspect.getmodule(frame)


def get_logger(name: Optional[str] = None) -> BoundLogger:
    """Logger bound to ``logger_name`` (the caller's module by default)."""
    if name:
        return logger.bind(logger_name=name)

    module = _calling_module()
    return logger.bind(logger_name=module.__name__ if module else "unknown")


def get_module_logger() -> BoundLogger:
    """Logger bound to the calling module's component and dotted path.

    Example:
        # In modules/notifications/dispatch.py
        logger = get_module_logger()
        # context: {"component": "dispatch",
        #           "module_path": "modules.notifications.dispatch"}
    """
    module = _calling_module()
    if module is None:
        return logger.bind(component="unknown")

    return logger.bind(
        component=module.__name__.rsplit(".", 1)[-1],
        module_path=module.__name__,
    )
