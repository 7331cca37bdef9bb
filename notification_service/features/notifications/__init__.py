"""Multi-channel notification dispatch.

Usage:
    from notification_service.features.notifications import (
        Recipient,
        get_notification_dispatcher,
    )

    dispatcher = get_notification_dispatcher()
    result = await dispatcher.dispatch(
        Recipient(id="u-1", first_name="Wanjiku", email="w@example.com", phone="0712345678"),
        "caseUpdate",
        {"case_title": "Kamau v. Otieno", "status": "Active", "update_message": "Hearing set."},
    )
"""

from __future__ import annotations

from notification_service.features.notifications.channels import NotificationDispatcher
from notification_service.features.notifications.config import (
    DEFAULT_EVENTS,
    EventConfigStore,
    QuietHoursPolicy,
    build_event_config_store,
)
from notification_service.features.notifications.factory import (
    build_notification_dispatcher,
    get_notification_dispatcher,
)
from notification_service.features.notifications.schemas import (
    Channel,
    ChannelConfig,
    ChannelOutcome,
    Failed,
    FailureReason,
    NotificationRequest,
    NotificationResult,
    Priority,
    Recipient,
    SendOutcome,
    Sent,
    SkipReason,
    Skipped,
)

__all__ = [
    "DEFAULT_EVENTS",
    "Channel",
    "ChannelConfig",
    "ChannelOutcome",
    "EventConfigStore",
    "Failed",
    "FailureReason",
    "NotificationDispatcher",
    "NotificationRequest",
    "NotificationResult",
    "Priority",
    "QuietHoursPolicy",
    "Recipient",
    "SendOutcome",
    "Sent",
    "SkipReason",
    "Skipped",
    "build_event_config_store",
    "build_notification_dispatcher",
    "get_notification_dispatcher",
]
