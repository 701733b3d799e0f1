"""Backfill the subscription status properties of Omnisend contacts."""

from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import BaseCommand, CommandError

from freya_omnisend.contacts import contact_store_handler
from freya_omnisend.contacts.exceptions import ContactStoreError
from freya_omnisend.subscriptions import subscription_store_handler
from freya_omnisend.subscriptions.exceptions import SubscriptionStoreError
from freya_omnisend.sync.batch import BatchConfig, BatchReconciliationDriver, format_elapsed
from freya_omnisend.sync.exceptions import PreconditionError


class Command(BaseCommand):
    """Replay the subscription status policy over all existing subscriptions."""

    help = (
        "Set the woocommerce_subscription_status_<product type> property of existing Omnisend contacts "
        "from their subscriptions. Defaults come from settings.FREYA_OMNISEND_BATCH."
    )

    def add_arguments(self, parser):
        """Add overrides of the batch settings."""
        parser.add_argument("--dry-run", action="store_true", default=None, help="Log instead of updating Omnisend.")
        parser.add_argument("--limit", type=int, dest="processing_limit", help="Stop after N subscriptions.")
        parser.add_argument("--offset", type=int, help="Number of subscriptions to skip.")
        parser.add_argument("--page-size", type=int, help="Subscriptions fetched per page.")

    def handle(self, *args, **options):
        """Run the reconciliation."""
        config = BatchConfig.from_settings(
            dry_run=options["dry_run"],
            processing_limit=options["processing_limit"],
            offset=options["offset"],
            page_size=options["page_size"],
        )
        try:
            store = subscription_store_handler()
            client = contact_store_handler()
        except (ImproperlyConfigured, ContactStoreError, SubscriptionStoreError) as err:
            raise CommandError(f"Required service is not available: {err}") from err

        self.stdout.write("Starting subscription property processing...")
        self.stdout.write(f"Batch size: {config.page_size} subscriptions")
        limit = f"{config.processing_limit} subscriptions" if config.processing_limit else "No limit"
        self.stdout.write(f"Processing limit: {limit}")
        checkpoint = "Enabled" if config.use_checkpoint else "Disabled (testing mode)"
        self.stdout.write(f"Reprocessing prevention: {checkpoint}")
        self.stdout.write(f"Dry run mode: {'ENABLED (no Omnisend updates)' if config.dry_run else 'Disabled'}")

        driver = BatchReconciliationDriver(config, store, client, progress=self.stdout.write)
        try:
            report = driver.run()
        except (PreconditionError, SubscriptionStoreError) as err:
            raise CommandError(str(err)) from err

        self.stdout.write(self.style.SUCCESS("Processing complete!"))
        if config.dry_run:
            self.stdout.write("DRY RUN MODE - Omnisend was not updated")
        self.stdout.write(f"  Total processed: {report.processed}")
        self.stdout.write(f"  Updated: {report.updated}{' (simulated)' if config.dry_run else ''}")
        self.stdout.write(f"  Skipped: {report.skipped}")
        self.stdout.write(f"  Already processed: {report.already_processed}")
        self.stdout.write(f"  Found in Omnisend: {report.contact_found}")
        self.stdout.write(f"  Contact not found in Omnisend: {report.contact_not_found}")
        self.stdout.write(f"  Errors: {report.errors}")
        self.stdout.write(f"  Total time: {format_elapsed(report.elapsed)}")
        if report.processed:
            self.stdout.write(f"  Average time per subscription: {report.elapsed / report.processed:.2f} seconds")
