"""Subscription store backend base module."""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from freya_omnisend.subscriptions.backends import Product, Subscription


class BaseBackend(ABC):
    """Base class for all subscription store backends."""

    @abstractmethod
    def get_subscription(self, subscription_id: int) -> Subscription | None:
        """Return a subscription, None if it does not exist."""

    @abstractmethod
    def list_subscriptions(
        self,
        customer: str | None = None,
        statuses: Iterable[str] | None = None,
        offset: int = 0,
        per_page: int | None = None,
        order: str = "asc",
    ) -> list[Subscription]:
        """
        List subscriptions ordered by start date.

        Args:
            customer: Billing email of the customer owning the subscriptions
            statuses: Only return subscriptions in one of these statuses
            offset: Number of subscriptions to skip
            per_page: Maximum number of subscriptions returned, None for all of them
            order: "asc" for the oldest first, "desc" for the newest first

        Raises:
            SubscriptionStoreError: If the store cannot be queried

        """

    @abstractmethod
    def get_product(self, product_id: int) -> Product | None:
        """Return a product, None if it does not exist."""
