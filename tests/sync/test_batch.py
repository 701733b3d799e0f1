"""Test the batch reconciliation driver."""

from datetime import timedelta
from unittest import mock

import pytest
from django.utils import timezone

from freya_omnisend.contacts.backends import Contact
from freya_omnisend.contacts.backends.locmem import LocMemBackend
from freya_omnisend.contacts.exceptions import ContactCreationError
from freya_omnisend.sync.batch import (
    SKIP_CONTACT_NOT_FOUND,
    SKIP_NOT_APPLICABLE,
    BatchConfig,
    BatchReconciliationDriver,
    ItemStatus,
    format_elapsed,
)
from freya_omnisend.sync.exceptions import EnvironmentGuardError, SyncError

from .. import factories

pytestmark = pytest.mark.django_db

PROPERTY = "woocommerce_subscription_status_glp_1"


class FlakyBackend(LocMemBackend):
    """In-memory contact store failing on a given email."""

    def __init__(self, failing_email):
        self.failing_email = failing_email

    def get_contact_by_email(self, email, timeout=None):
        if email == self.failing_email:
            raise RuntimeError("Omnisend timed out")
        return super().get_contact_by_email(email, timeout=timeout)


@pytest.fixture
def store(subscription_store):
    """Return a subscription store knowing the GLP-1 product."""
    subscription_store.add_product(factories.ProductFactory(id=100, product_type="glp-1"))
    return subscription_store


def add_subscriptions(store, client, count, with_contacts=True, **kwargs):
    """Add `count` subscriptions, oldest first, and their Omnisend contacts."""
    start = timezone.now() - timedelta(days=5)
    subscriptions = []
    for i in range(count):
        subscription = factories.SubscriptionFactory(
            billing_email=f"user{i}@example.com", created_at=start + timedelta(minutes=i), **kwargs
        )
        store.add_subscription(subscription)
        if with_contacts:
            client.create_contact(Contact(email=subscription.billing_email, custom_properties={"other": "kept"}))
        subscriptions.append(subscription)
    return subscriptions


def make_driver(store, client, progress=None, **config):
    """Return a driver which never sleeps."""
    return BatchReconciliationDriver(
        BatchConfig(**{"page_delay": 0, **config}),
        store,
        client,
        progress=progress,
        sleep=mock.Mock(),
    )


def test_run_updates_existing_contacts(store, contact_client):
    """Test contacts get the status property of their subscription, others are skipped."""
    add_subscriptions(store, contact_client, 2)
    store.add_subscription(factories.SubscriptionFactory(billing_email="unknown@example.com", status="on-hold"))

    report = make_driver(store, contact_client).run()

    assert report.processed == 3
    assert report.updated == 2
    assert report.contact_found == 2
    assert report.skipped == 1
    assert report.contact_not_found == 1
    assert report.errors == 0
    assert contact_client.get_contact_by_email("user0@example.com").custom_properties == {
        "other": "kept",
        PROPERTY: "active",
    }
    assert contact_client.get_contact_by_email("unknown@example.com") is None


def test_run_error_on_one_subscription_does_not_stop_the_run(store):
    """Test a remote failure on the third of ten subscriptions is counted once."""
    client = FlakyBackend(failing_email="user2@example.com")
    subscriptions = add_subscriptions(store, client, 10)
    messages = []

    report = make_driver(store, client, progress=messages.append).run()

    assert report.processed == 10
    assert report.errors == 1
    assert report.updated == 9
    assert report.failed_subscription_ids == [subscriptions[2].id]
    assert f"  Error: subscription #{subscriptions[2].id} - Omnisend timed out" in messages
    assert client.get_contact_by_email("user9@example.com").custom_properties[PROPERTY] == "active"


def test_run_twice_skips_processed_subscriptions(store, contact_client):
    """Test the checkpoint makes a second run a no-op."""
    subscriptions = add_subscriptions(store, contact_client, 3)
    for subscription in subscriptions:
        factories.UserFactory(email=subscription.billing_email)

    first = make_driver(store, contact_client).run()
    contact_client.create_contact(Contact(email="user0@example.com", custom_properties={"other": "changed"}))
    second = make_driver(store, contact_client).run()

    assert first.updated == 3
    assert second.processed == 3
    assert second.already_processed == 3
    assert second.updated == 0
    assert contact_client.get_contact_by_email("user0@example.com").custom_properties == {"other": "changed"}


def test_run_dry_run(store, contact_client):
    """Test a dry run counts the updates without writing or checkpointing them."""
    subscriptions = add_subscriptions(store, contact_client, 2)
    factories.UserFactory(email=subscriptions[0].billing_email)
    messages = []

    report = make_driver(store, contact_client, progress=messages.append, dry_run=True).run()

    assert report.updated == 2
    assert contact_client.get_contact_by_email("user0@example.com").custom_properties == {"other": "kept"}
    assert any(message.startswith("    [DRY RUN] Would update") for message in messages)
    assert make_driver(store, contact_client).run().already_processed == 0


def test_run_processing_limit(store, contact_client):
    """Test the limit stops the run and ignores the checkpoint."""
    subscriptions = add_subscriptions(store, contact_client, 10)
    factories.UserFactory(email=subscriptions[0].billing_email)
    make_driver(store, contact_client).run()
    messages = []

    report = make_driver(store, contact_client, progress=messages.append, processing_limit=4, page_size=3).run()

    assert report.processed == 4
    assert report.already_processed == 0
    assert report.updated == 4
    assert "Processing limit reached (4 subscriptions). Stopping." in messages


def test_run_pages_through_all_subscriptions(store, contact_client):
    """Test pages are read until an empty one, waiting between pages."""
    add_subscriptions(store, contact_client, 7)
    driver = make_driver(store, contact_client, page_size=3, page_delay=0.5)

    report = driver.run()

    assert report.processed == 7
    assert driver._sleep.call_args_list == [mock.call(0.5)] * 3


def test_run_offset(store, contact_client):
    """Test the run starts at the configured offset."""
    add_subscriptions(store, contact_client, 5)

    report = make_driver(store, contact_client, offset=3).run()

    assert report.processed == 2
    assert PROPERTY not in contact_client.get_contact_by_email("user0@example.com").custom_properties


def test_run_refused_outside_production(settings, store, contact_client):
    """Test live runs are refused on other sites, dry runs are allowed."""
    settings.FREYA_OMNISEND_SITE_URL = "https://staging.freyameds.com"
    add_subscriptions(store, contact_client, 1)

    with pytest.raises(EnvironmentGuardError):
        make_driver(store, contact_client).run()

    assert make_driver(store, contact_client, dry_run=True).run().updated == 1


def test_process_subscription_old_active(store, contact_client):
    """Test old active subscriptions are not applicable."""
    (subscription,) = add_subscriptions(store, contact_client, 1)
    subscription.created_at = timezone.now() - timedelta(days=30)

    outcome = make_driver(store, contact_client).process_subscription(subscription)

    assert outcome.status == ItemStatus.SKIPPED
    assert outcome.reason == SKIP_NOT_APPLICABLE


def test_process_subscription_cancelled_with_live_sibling(store, contact_client):
    """Test a cancelled subscription is skipped when another of the same type is on hold."""
    (subscription,) = add_subscriptions(store, contact_client, 1, status="cancelled")
    store.add_subscription(factories.SubscriptionFactory(billing_email="user0@example.com", status="on-hold"))

    outcome = make_driver(store, contact_client).process_subscription(subscription)

    assert outcome.reason == SKIP_NOT_APPLICABLE


def test_process_subscription_contact_not_found(store, contact_client):
    """Test contacts missing from Omnisend are never created."""
    (subscription,) = add_subscriptions(store, contact_client, 1, with_contacts=False, status="on-hold")

    outcome = make_driver(store, contact_client).process_subscription(subscription)

    assert outcome.reason == SKIP_CONTACT_NOT_FOUND
    assert contact_client.get_contact_by_email("user0@example.com") is None


def test_process_subscription_write_refused(store):
    """Test a refused write raises a sync error."""
    client = mock.Mock()
    client.get_contact_by_email.return_value = Contact(email="user0@example.com")
    client.create_contact.side_effect = ContactCreationError("Failed to create contact in Omnisend")
    (subscription,) = add_subscriptions(store, client, 1, with_contacts=False)

    with pytest.raises(SyncError):
        make_driver(store, client).process_subscription(subscription)


def test_batch_config_from_settings(settings):
    """Test settings are read and overridden by non-None values."""
    settings.FREYA_OMNISEND_BATCH = {"PAGE_SIZE": 50, "DRY_RUN": True, "UNKNOWN": 1}

    config = BatchConfig.from_settings(dry_run=None, processing_limit=5)

    assert config.page_size == 50
    assert config.dry_run is True
    assert config.processing_limit == 5
    assert config.use_checkpoint is False


@pytest.mark.parametrize(
    ("seconds", "expected"), [(0, "0s"), (42.9, "42s"), (185, "3m 5s"), (7800, "2h 10m")]
)
def test_format_elapsed(seconds, expected):
    """Test durations are formatted for progress output."""
    assert format_elapsed(seconds) == expected


def test_run_memory_hints(store, contact_client):
    """Test queries are reset and garbage collected every `gc_interval` subscriptions."""
    add_subscriptions(store, contact_client, 5)

    with (
        mock.patch("freya_omnisend.sync.batch.gc.collect") as collect,
        mock.patch("freya_omnisend.sync.batch.reset_queries") as reset_queries,
    ):
        report = make_driver(store, contact_client, gc_interval=2).run()

    assert report.processed == 5
    assert collect.call_count == 2
    assert reset_queries.call_count == 2


def test_run_memory_hints_disabled(store, contact_client):
    """Test a zero interval disables the memory hints instead of failing."""
    add_subscriptions(store, contact_client, 3)

    with mock.patch("freya_omnisend.sync.batch.gc.collect") as collect:
        report = make_driver(store, contact_client, gc_interval=0).run()

    assert report.processed == 3
    assert report.errors == 0
    collect.assert_not_called()
