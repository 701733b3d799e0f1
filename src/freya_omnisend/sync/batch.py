"""Backfill of the subscription status properties of existing Omnisend contacts."""

import gc
import logging
import time
from dataclasses import dataclass, field
from enum import StrEnum

from django.conf import settings
from django.db import reset_queries

from freya_omnisend.subscriptions.enums import HANDLED_STATUSES
from freya_omnisend.sync.checkpoint import ProcessedMarker
from freya_omnisend.sync.environment import check_environment
from freya_omnisend.sync.exceptions import SyncError
from freya_omnisend.sync.policy import NEW_SUBSCRIPTION_DAYS, SiblingScope, SubscriptionStatusPolicy
from freya_omnisend.sync.product_type import get_property_name, get_subscription_product_type
from freya_omnisend.sync.reconciler import ContactPropertyReconciler

logger = logging.getLogger(__name__)


def format_elapsed(seconds):
    """Format a duration in seconds as "42s", "3m 5s" or "2h 10m"."""
    seconds = int(seconds)
    if seconds < 60:  # noqa: PLR2004
        return f"{seconds}s"
    if seconds < 3600:  # noqa: PLR2004
        return f"{seconds // 60}m {seconds % 60}s"
    return f"{seconds // 3600}h {seconds % 3600 // 60}m"


@dataclass
class BatchConfig:
    """Configuration of a reconciliation run."""

    page_size: int = 100
    # 0 for no limit, a limit also disables the checkpoint (testing mode)
    processing_limit: int = 0
    # Log the writes instead of sending them to Omnisend
    dry_run: bool = False
    offset: int = 0
    # Seconds to wait between pages
    page_delay: float = 0.1
    # Collect garbage every `gc_interval` subscriptions
    gc_interval: int = 50
    activation_window_days: int | None = NEW_SUBSCRIPTION_DAYS
    sibling_scope: str = SiblingScope.SAME_PRODUCT_TYPE

    @classmethod
    def from_settings(cls, **overrides):
        """Read settings.FREYA_OMNISEND_BATCH, using upper-cased field names as keys."""
        values = {
            key.lower(): value
            for key, value in getattr(settings, "FREYA_OMNISEND_BATCH", {}).items()
            if key.lower() in cls.__dataclass_fields__
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    @property
    def use_checkpoint(self):
        """Tell whether already processed subscriptions are looked up and skipped."""
        return not self.processing_limit


class ItemStatus(StrEnum):
    """Outcome of the reconciliation of a single subscription."""

    UPDATED = "updated"
    SKIPPED = "skipped"


SKIP_NO_EMAIL = "No billing email"
SKIP_NOT_APPLICABLE = "Status not applicable (old subscription or has other active subscriptions)"
SKIP_CONTACT_NOT_FOUND = "Contact does not exist in Omnisend"


@dataclass
class ItemOutcome:
    """Result of the reconciliation of a single subscription."""

    status: ItemStatus
    reason: str = ""
    property_name: str = ""
    value: str | None = None


@dataclass
class BatchReport:
    """Counters of a reconciliation run."""

    processed: int = 0
    updated: int = 0
    skipped: int = 0
    already_processed: int = 0
    contact_found: int = 0
    contact_not_found: int = 0
    errors: int = 0
    elapsed: float = 0.0
    failed_subscription_ids: list[int] = field(default_factory=list)

    def progress_line(self):
        """Return a one line summary of the counters."""
        return (
            f"Progress: {self.processed} processed | Updated: {self.updated} | Skipped: {self.skipped} | "
            f"Already processed: {self.already_processed} | Found in Omnisend: {self.contact_found} | "
            f"Contact not found: {self.contact_not_found} | Errors: {self.errors}"
        )


class BatchReconciliationDriver:
    """
    Replay the subscription status policy over every existing subscription.

    Subscriptions are read page by page, oldest first. Contacts missing from
    Omnisend are left alone: the job only patches existing contacts. A failure
    on one subscription is counted and the run goes on.
    """

    def __init__(self, config, store, client, checkpoint=None, policy=None, progress=None, sleep=time.sleep):
        """Initialize the driver with its configuration and collaborators."""
        self.config = config
        self.store = store
        self.reconciler = ContactPropertyReconciler(client)
        self.checkpoint = checkpoint or ProcessedMarker()
        self.policy = policy or SubscriptionStatusPolicy(
            store,
            sibling_scope=config.sibling_scope,
            activation_window_days=config.activation_window_days,
        )
        self.progress = progress or logger.info
        self._sleep = sleep

    def run(self):
        """
        Reconcile all subscriptions.

        Raises:
            EnvironmentGuardError: If live changes are requested outside production

        """
        check_environment(dry_run=self.config.dry_run)

        report = BatchReport()
        started = time.monotonic()
        offset = self.config.offset
        batch_number = 1
        limit = self.config.processing_limit

        while True:
            self.progress(f"Processing batch {batch_number} (starting from offset {offset})...")
            subscriptions = self.store.list_subscriptions(
                statuses=[str(status) for status in HANDLED_STATUSES],
                offset=offset,
                per_page=self.config.page_size,
                order="asc",
            )
            if not subscriptions:
                self.progress("No more subscriptions found. Processing complete.")
                break
            self.progress(f"Found {len(subscriptions)} subscriptions in batch {batch_number}")

            for subscription in subscriptions:
                if limit and report.processed >= limit:
                    self.progress(f"Processing limit reached ({limit} subscriptions). Stopping.")
                    report.elapsed = time.monotonic() - started
                    return report
                report.processed += 1
                self._process_item(subscription, report)
                if self.config.gc_interval and report.processed % self.config.gc_interval == 0:
                    reset_queries()
                    gc.collect()

            report.elapsed = time.monotonic() - started
            self.progress(report.progress_line())
            self.progress(f"Elapsed: {format_elapsed(report.elapsed)}")

            offset += self.config.page_size
            batch_number += 1
            self._sleep(self.config.page_delay)

        report.elapsed = time.monotonic() - started
        return report

    def _process_item(self, subscription, report):
        email = subscription.billing_email
        try:
            if self.config.use_checkpoint and self.checkpoint.is_processed(email, subscription.id):
                report.already_processed += 1
                self.progress(f"  Already processed: subscription #{subscription.id}")
                return
            outcome = self.process_subscription(subscription)
        except Exception as err:  # noqa: BLE001
            report.errors += 1
            report.failed_subscription_ids.append(subscription.id)
            logger.exception("Error processing subscription %s", subscription.id)
            self.progress(f"  Error: subscription #{subscription.id} - {err}")
            return

        if outcome.status == ItemStatus.UPDATED:
            report.updated += 1
            report.contact_found += 1
            prefix = "[DRY RUN] " if self.config.dry_run else ""
            self.progress(
                f"  {prefix}Updated: subscription #{subscription.id} - {outcome.property_name} = {outcome.value}"
            )
            if self.config.use_checkpoint and not self.config.dry_run:
                self.checkpoint.mark_processed(email, subscription.id)
            return

        report.skipped += 1
        if outcome.reason == SKIP_CONTACT_NOT_FOUND:
            report.contact_not_found += 1
        self.progress(f"  Skipped: subscription #{subscription.id} - {outcome.reason}")

    def process_subscription(self, subscription):
        """
        Reconcile the contact property of a single subscription.

        Raises:
            SyncError: If Omnisend refused the update

        """
        email = subscription.billing_email
        if not email:
            return ItemOutcome(ItemStatus.SKIPPED, SKIP_NO_EMAIL)

        product_type = get_subscription_product_type(subscription, self.store)
        property_name = get_property_name(product_type)
        value = self.policy.determine_status(subscription, email, subscription.status)
        if value is None:
            return ItemOutcome(ItemStatus.SKIPPED, SKIP_NOT_APPLICABLE)

        if not self.reconciler.contact_exists(email):
            return ItemOutcome(ItemStatus.SKIPPED, SKIP_CONTACT_NOT_FOUND)

        if self.config.dry_run:
            self.progress(f"    [DRY RUN] Would update Omnisend contact {email}: {property_name} = {value}")
        elif not self.reconciler.update_property(email, property_name, value):
            raise SyncError("Failed to update Omnisend contact")

        return ItemOutcome(ItemStatus.UPDATED, property_name=property_name, value=value)
