"""Check everything needed by process_subscription_properties is in place."""

import math

from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import BaseCommand, CommandError

from freya_omnisend.contacts import contact_store_handler
from freya_omnisend.contacts.exceptions import ContactStoreError
from freya_omnisend.subscriptions import subscription_store_handler
from freya_omnisend.subscriptions.exceptions import SubscriptionStoreError
from freya_omnisend.sync.environment import get_site_host, is_production_environment
from freya_omnisend.sync.product_type import get_property_name, get_subscription_product_type

ESTIMATED_SECONDS_PER_SUBSCRIPTION = 0.5
SAMPLE_SIZE = 5
PAGE_SIZE = 100


class Command(BaseCommand):
    """Preflight checks before a subscription properties backfill."""

    help = "Check the environment, the WooCommerce and Omnisend backends, and estimate the backfill duration."

    def handle(self, *args, **options):
        """Run the checks, stopping at the first failure."""
        if not is_production_environment():
            raise CommandError(f"FAIL: Not on live site. Current domain: {get_site_host()}")
        self.stdout.write(f"PASS: Running on live site ({get_site_host()})")

        try:
            store = subscription_store_handler()
        except (ImproperlyConfigured, SubscriptionStoreError) as err:
            raise CommandError(f"FAIL: WooCommerce Subscriptions not available: {err}") from err
        self.stdout.write("PASS: WooCommerce Subscriptions available")

        try:
            client = contact_store_handler()
        except (ImproperlyConfigured, ContactStoreError) as err:
            raise CommandError(f"FAIL: Omnisend not available: {err}") from err
        self.stdout.write("PASS: Omnisend backend available")

        try:
            subscriptions = store.list_subscriptions()
        except SubscriptionStoreError as err:
            raise CommandError(f"FAIL: Could not list subscriptions: {err}") from err
        total = len(subscriptions)
        self.stdout.write(f"PASS: Found {total} subscriptions")

        self.stdout.write("\nSample subscriptions:")
        for subscription in subscriptions[:SAMPLE_SIZE]:
            product_type = get_subscription_product_type(subscription, store)
            self.stdout.write(f"  Subscription #{subscription.id}:")
            self.stdout.write(f"    Email: {subscription.billing_email or 'N/A'}")
            self.stdout.write(f"    Status: {subscription.status}")
            self.stdout.write(f"    Product type: {product_type or 'N/A'}")
            self.stdout.write(f"    Property name: {get_property_name(product_type)}")

        try:
            client.get_contact_by_email(f"connection-check@{get_site_host() or 'example.com'}")
        except ContactStoreError as err:
            raise CommandError(f"FAIL: Omnisend connection error: {err}") from err
        self.stdout.write("PASS: Omnisend connection successful")

        hours = total * ESTIMATED_SECONDS_PER_SUBSCRIPTION / 3600
        self.stdout.write("\nProcessing estimates:")
        self.stdout.write(f"  Total subscriptions: {total}")
        self.stdout.write(f"  Estimated time per subscription: {ESTIMATED_SECONDS_PER_SUBSCRIPTION}s")
        self.stdout.write(f"  Estimated total time: {hours:.1f} hours")
        self.stdout.write(f"  Estimated batches: {math.ceil(total / PAGE_SIZE)} ({PAGE_SIZE} per batch)")
        self.stdout.write(self.style.SUCCESS("All checks passed! Run: manage.py process_subscription_properties"))
