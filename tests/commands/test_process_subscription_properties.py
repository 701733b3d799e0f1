"""Test the process_subscription_properties management command."""

from datetime import timedelta
from io import StringIO
from unittest import mock

import pytest
from django.core.exceptions import ImproperlyConfigured
from django.core.management import CommandError, call_command
from django.utils import timezone

from freya_omnisend.contacts.backends import Contact

from .. import factories

pytestmark = pytest.mark.django_db

COMMAND = "freya_omnisend.management.commands.process_subscription_properties"


@pytest.fixture
def store(subscription_store, contact_client):
    """Return a store holding two subscriptions, one of a known contact."""
    subscription_store.add_product(factories.ProductFactory(id=100, product_type="vitality"))
    start = timezone.now() - timedelta(days=3)
    subscription_store.add_subscription(
        factories.SubscriptionFactory(billing_email="ada@example.com", status="on-hold", created_at=start)
    )
    subscription_store.add_subscription(
        factories.SubscriptionFactory(billing_email="nobody@example.com", created_at=start + timedelta(hours=1))
    )
    contact_client.create_contact(Contact(email="ada@example.com"))
    return subscription_store


def run(store, client, *args):
    """Run the command with the given backends and return its output."""
    out = StringIO()
    with (
        mock.patch(f"{COMMAND}.subscription_store_handler", return_value=store),
        mock.patch(f"{COMMAND}.contact_store_handler", return_value=client),
    ):
        call_command("process_subscription_properties", *args, stdout=out)
    return out.getvalue()


def test_command_updates_contacts(store, contact_client):
    """Test the command updates the contacts and prints a summary."""
    output = run(store, contact_client)

    assert contact_client.get_contact_by_email("ada@example.com").custom_properties == {
        "woocommerce_subscription_status_nad": "on-hold"
    }
    assert "Reprocessing prevention: Enabled" in output
    assert "Processing complete!" in output
    assert "  Total processed: 2" in output
    assert "  Updated: 1\n" in output
    assert "  Contact not found in Omnisend: 1" in output


def test_command_dry_run_with_limit(store, contact_client):
    """Test the options override the settings."""
    output = run(store, contact_client, "--dry-run", "--limit", "1")

    assert contact_client.get_contact_by_email("ada@example.com").custom_properties == {}
    assert "Processing limit: 1 subscriptions" in output
    assert "Reprocessing prevention: Disabled (testing mode)" in output
    assert "DRY RUN MODE - Omnisend was not updated" in output
    assert "  Updated: 1 (simulated)" in output
    assert "  Total processed: 1" in output


def test_command_refused_outside_production(settings, store, contact_client):
    """Test the command fails on other sites unless in dry run mode."""
    settings.FREYA_OMNISEND_SITE_URL = "https://staging.freyameds.com"

    with pytest.raises(CommandError, match="only allowed on the production site"):
        run(store, contact_client)

    assert "Processing complete!" in run(store, contact_client, "--dry-run")


def test_command_without_omnisend(store):
    """Test the command fails when Omnisend is not configured."""
    with (
        mock.patch(f"{COMMAND}.subscription_store_handler", return_value=store),
        mock.patch(f"{COMMAND}.contact_store_handler", side_effect=ImproperlyConfigured("no api key")),
        pytest.raises(CommandError, match="Required service is not available: no api key"),
    ):
        call_command("process_subscription_properties", stdout=StringIO())
