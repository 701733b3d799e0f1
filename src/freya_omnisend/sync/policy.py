"""Decide which subscription status to store on the Omnisend contact."""

import logging
from datetime import timedelta
from enum import StrEnum

from django.utils import timezone

from freya_omnisend.subscriptions.enums import LIVE_STATUSES, SubscriptionStatus
from freya_omnisend.sync.product_type import get_subscription_product_type

logger = logging.getLogger(__name__)

# Subscriptions older than this are not (re)marked as active
NEW_SUBSCRIPTION_DAYS = 14


class SiblingScope(StrEnum):
    """Which other subscriptions of the customer prevent a downgrade to cancelled."""

    ANY = "any"
    SAME_PRODUCT_TYPE = "same_product_type"


class SubscriptionStatusPolicy:
    """
    Map a subscription status change to the value of the contact property.

    - active: set only for subscriptions created within the activation window, a
      late "active" event for an old subscription must not clobber a later status.
    - cancelled: set only when the customer holds no other active or on-hold
      subscription (of any product type, or of the same product type depending
      on `sibling_scope`).
    - on-hold: always set.
    """

    def __init__(
        self,
        store,
        sibling_scope=SiblingScope.ANY,
        activation_window_days=NEW_SUBSCRIPTION_DAYS,
        now=timezone.now,
    ):
        """Initialize the policy against a subscription store."""
        self.store = store
        self.sibling_scope = SiblingScope(sibling_scope)
        # None disables the activation window
        self.activation_window_days = activation_window_days
        self._now = now

    def determine_status(self, subscription, customer_email, new_status):
        """
        Return the status to store on the contact.

        Returns:
            str | None: The property value, None when the property must not change

        """
        match new_status:
            case SubscriptionStatus.ACTIVE:
                return self._determine_active(subscription)
            case SubscriptionStatus.CANCELLED:
                if self.has_other_live_subscriptions(subscription, customer_email):
                    logger.info("Other active subscriptions found for %s, not setting cancelled", customer_email)
                    return None
                return str(SubscriptionStatus.CANCELLED)
            case SubscriptionStatus.ON_HOLD:
                return str(SubscriptionStatus.ON_HOLD)
        return None

    def _determine_active(self, subscription):
        if self.activation_window_days is None:
            return str(SubscriptionStatus.ACTIVE)
        if subscription.created_at is None:
            logger.info("Subscription %s has no creation date: not updating status", subscription.id)
            return None

        age = self._now() - subscription.created_at
        days_since_creation = age / timedelta(days=1)
        if days_since_creation <= self.activation_window_days:
            return str(SubscriptionStatus.ACTIVE)

        logger.info(
            "Subscription %s is %.2f days old, older than %s days: not updating status",
            subscription.id,
            days_since_creation,
            self.activation_window_days,
        )
        return None

    def has_other_live_subscriptions(self, subscription, customer_email):
        """Tell whether the customer holds another active or on-hold subscription."""
        product_type = None
        if self.sibling_scope == SiblingScope.SAME_PRODUCT_TYPE:
            product_type = get_subscription_product_type(subscription, self.store)
            if not product_type:
                return False

        siblings = self.store.list_subscriptions(customer=customer_email, statuses=[str(s) for s in LIVE_STATUSES])
        for sibling in siblings:
            if sibling.id == subscription.id:
                continue
            if product_type is not None and get_subscription_product_type(sibling, self.store) != product_type:
                continue
            logger.info("Found other subscription %s with status %s", sibling.id, sibling.status)
            return True
        return False
