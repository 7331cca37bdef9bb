"""Prometheus metrics for notification dispatch monitoring.

This module provides metrics for tracking notifications:
- Dispatch counters per event type
- Per-channel outcomes by status and reason
- Delivery duration histograms
- Retry attempts tracking

Usage:
    from notification_service.features.notifications.metrics import (
        notification_channel_outcome_total,
        notification_dispatched_total,
    )

    notification_dispatched_total.labels(event_type="welcome").inc()

    notification_channel_outcome_total.labels(
        channel="sms",
        status="skipped",
        reason="quiet_hours",
    ).inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Dispatch Metrics
# =============================================================================

notification_dispatched_total = Counter(
    "notification_dispatched_total",
    "Total number of notifications dispatched",
    labelnames=["event_type"],
)
"""
Counter for tracking dispatch calls.

Labels:
    event_type: Business event name, or "unknown" for unconfigured events

Example:
    notification_dispatched_total.labels(event_type="caseUpdate").inc()
"""

notification_channel_outcome_total = Counter(
    "notification_channel_outcome_total",
    "Total number of channel outcomes by channel, status and reason",
    labelnames=["channel", "status", "reason"],
)
"""
Counter for tracking per-channel outcomes.

Labels:
    channel: email, sms or whatsapp
    status: sent, skipped or failed
    reason: Skip/failure reason, "none" for sent

Example:
    notification_channel_outcome_total.labels(
        channel="email",
        status="failed",
        reason="retries_exhausted",
    ).inc()
"""

# =============================================================================
# Delivery Metrics
# =============================================================================

notification_delivery_duration_seconds = Histogram(
    "notification_delivery_duration_seconds",
    "Time spent delivering through a channel, including retries",
    labelnames=["channel"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)
"""
Histogram tracking delivery duration distribution.

Labels:
    channel: Delivery channel

Buckets:
    50ms, 100ms, 250ms, 500ms, 1s, 2.5s, 5s, 10s, 30s, 60s

Example:
    with notification_delivery_duration_seconds.labels(channel="sms").time():
        await sender.deliver(destination, content)
"""

notification_retry_attempts_total = Counter(
    "notification_retry_attempts_total",
    "Total number of provider retry attempts",
    labelnames=["channel"],
)

notification_sms_length_exceeded_total = Counter(
    "notification_sms_length_exceeded_total",
    "SMS messages rendered longer than their template's max length",
)
