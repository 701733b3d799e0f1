"""Test the in-memory subscription store backend."""

from datetime import timedelta

from django.utils import timezone

from freya_omnisend.subscriptions.backends.memory import InMemoryBackend

from ... import factories


def test_list_subscriptions_oldest_first_with_pagination():
    """Test subscriptions are ordered by creation date and paginated."""
    now = timezone.now()
    newest = factories.SubscriptionFactory(created_at=now)
    oldest = factories.SubscriptionFactory(created_at=now - timedelta(days=30))
    middle = factories.SubscriptionFactory(created_at=now - timedelta(days=10))
    store = InMemoryBackend(subscriptions=[newest, oldest, middle])

    assert store.list_subscriptions() == [oldest, middle, newest]
    assert store.list_subscriptions(offset=1, per_page=1) == [middle]
    assert store.list_subscriptions(offset=3, per_page=100) == []
    assert store.list_subscriptions(order="desc")[0] == newest


def test_list_subscriptions_filters():
    """Test the customer filter ignores case and the status filter."""
    active = factories.SubscriptionFactory(billing_email="Test@example.com", status="active")
    cancelled = factories.SubscriptionFactory(billing_email="test@example.com", status="cancelled")
    factories.SubscriptionFactory(billing_email="other@example.com", status="active")
    store = InMemoryBackend(subscriptions=[active, cancelled])

    assert store.list_subscriptions(customer="TEST@example.com") == [active, cancelled]
    assert store.list_subscriptions(customer="test@example.com", statuses=["active", "on-hold"]) == [active]


def test_get_subscription_and_product():
    """Test lookups by id."""
    subscription = factories.SubscriptionFactory()
    product = factories.ProductFactory()
    store = InMemoryBackend(subscriptions=[subscription], products=[product])

    assert store.get_subscription(subscription.id) is subscription
    assert store.get_subscription(-1) is None
    assert store.get_product(product.id) is product
    assert store.get_product(-1) is None
