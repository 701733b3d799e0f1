"""WooCommerce subscription store module."""

from django.utils.functional import LazyObject

from .handler import SubscriptionStoreHandler


class DefaultSubscriptionStore(LazyObject):
    """Lazy object to handle the subscription store backend."""

    def _setup(self):
        """Configure the subscription store backend."""
        self._wrapped = subscription_store_handler()


subscription_store_handler = SubscriptionStoreHandler()
subscription_store = DefaultSubscriptionStore()
