"""In-memory subscription store backend, for tests and local development."""

from freya_omnisend.subscriptions.backends import Product, Subscription

from .base import BaseBackend


class InMemoryBackend(BaseBackend):
    """Subscription store backed by plain lists and dicts."""

    def __init__(self, subscriptions=None, products=None):
        """Initialize the store with optional subscriptions and products."""
        self.subscriptions = list(subscriptions or [])
        self.products = {product.id: product for product in products or []}

    def add_subscription(self, subscription: Subscription):
        """Add a subscription to the store."""
        self.subscriptions.append(subscription)

    def add_product(self, product: Product):
        """Add a product to the store."""
        self.products[product.id] = product

    def get_subscription(self, subscription_id):
        """Return a subscription, None if it does not exist."""
        return next((s for s in self.subscriptions if s.id == subscription_id), None)

    def list_subscriptions(self, customer=None, statuses=None, offset=0, per_page=None, order="asc"):
        """List subscriptions ordered by creation date."""
        subscriptions = sorted(self.subscriptions, key=lambda s: (s.created_at, s.id), reverse=order == "desc")
        if customer is not None:
            subscriptions = [s for s in subscriptions if s.billing_email.lower() == customer.lower()]
        if statuses is not None:
            statuses = set(statuses)
            subscriptions = [s for s in subscriptions if s.status in statuses]
        end = None if per_page is None else offset + per_page
        return subscriptions[offset:end]

    def get_product(self, product_id):
        """Return a product, None if it does not exist."""
        return self.products.get(product_id)
