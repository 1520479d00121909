"""
Prometheus metrics for bookings, payments, notifications and pricing.

This module defines all Prometheus metrics used throughout the application for
observability and monitoring. Metrics are exposed via the /metrics endpoint for
scraping by Prometheus.

Metric Types:
    - Counter: Cumulative metrics that only increase (e.g., bookings created)
    - Histogram: Observations bucketed by value (e.g., quote latency)

Example:
    >>> from vacation_booking.metrics import bookings_created
    >>> bookings_created.labels(outcome="confirmed").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Booking Metrics
# =============================================================================

bookings_created = Counter(
    "vacation_bookings_created_total",
    "Booking creation attempts by outcome",
    ["outcome"],
)
"""
Counter for booking creation attempts.

Labels:
    outcome: confirmed, pending, payment_failed, conflict or replayed
"""

booking_conflicts = Counter(
    "vacation_booking_conflicts_total",
    "Booking attempts rejected because the dates were taken",
    ["source"],
)
"""
Counter for availability conflicts.

Labels:
    source: check (found by the availability query) or constraint (storage guard)
"""

booking_cancellations = Counter(
    "vacation_booking_cancellations_total",
    "Bookings canceled",
    ["actor_role"],
)
"""
Counter for cancellations.

Labels:
    actor_role: client, property_owner or admin
"""

booking_status_overrides = Counter(
    "vacation_booking_status_overrides_total",
    "Administrative booking status overrides",
    ["from_status", "to_status"],
)

bookings_completed = Counter(
    "vacation_bookings_completed_total",
    "Confirmed bookings moved to completed after check-out",
)

# =============================================================================
# Payment Metrics
# =============================================================================

payments = Counter(
    "vacation_booking_payments_total",
    "Charge attempts by payment method and result",
    ["method", "status"],
)
"""
Counter for charge attempts.

Labels:
    method: stripe or bank_transfer
    status: completed, pending or failed
"""

refunds = Counter(
    "vacation_booking_refunds_total",
    "Refund attempts by result",
    ["status"],
)

payment_webhook_events = Counter(
    "vacation_booking_payment_webhook_events_total",
    "Payment provider webhook events by type and handling result",
    ["event_type", "result"],
)
"""
Counter for payment webhook events.

Labels:
    event_type: Provider event type (e.g., payment_intent.succeeded)
    result: processed, duplicate, ignored, unmatched or rejected
"""

# =============================================================================
# Notification Metrics
# =============================================================================

notifications = Counter(
    "vacation_booking_notifications_total",
    "Notification deliveries by template and result",
    ["template", "result"],
)

# =============================================================================
# Pricing Metrics
# =============================================================================

pricing_duration = Histogram(
    "vacation_booking_pricing_duration_seconds",
    "Time spent pricing a stay",
    ["operation"],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, float("inf")),
)
"""
Histogram for pricing computations.

Labels:
    operation: quote

Buckets: 1ms, 5ms, 10ms, 50ms, 100ms, 500ms, 1s, +Inf
"""
