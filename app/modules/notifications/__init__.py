"""Notification delivery and failure resolution pipelines.

Public API:
    - DispatchProcessor: sends one email per queued notification event
    - FailureResolutionEngine: classifies and remediates dead-lettered messages
    - Notification, FailureRecord: persisted entities
"""

from modules.notifications.classification import ErrorCategory
from modules.notifications.dispatch import DispatchBatchResult, DispatchProcessor
from modules.notifications.failures import FailureRecord
from modules.notifications.models import (
    Notification,
    NotificationStatus,
    NotificationType,
)
from modules.notifications.resolution import (
    FailureResolutionEngine,
    ResolutionAction,
    ResolutionBatchResult,
    analyze_failure,
)
from modules.notifications.template_cache import TemplateCache, TemplateResolver

__all__ = [
    "DispatchBatchResult",
    "DispatchProcessor",
    "ErrorCategory",
    "FailureRecord",
    "FailureResolutionEngine",
    "Notification",
    "NotificationStatus",
    "NotificationType",
    "ResolutionAction",
    "ResolutionBatchResult",
    "TemplateCache",
    "TemplateResolver",
    "analyze_failure",
]
