"""Enums for WooCommerce subscriptions."""

from enum import StrEnum


class SubscriptionStatus(StrEnum):
    """Subscription statuses the synchronization cares about."""

    ACTIVE = "active"
    ON_HOLD = "on-hold"
    CANCELLED = "cancelled"


# Statuses for which a status change updates the contact property
HANDLED_STATUSES = (SubscriptionStatus.ACTIVE, SubscriptionStatus.ON_HOLD, SubscriptionStatus.CANCELLED)

# Statuses meaning the customer still holds the subscription
LIVE_STATUSES = (SubscriptionStatus.ACTIVE, SubscriptionStatus.ON_HOLD)
