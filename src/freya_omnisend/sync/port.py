"""Entry points called by the host when forms or subscriptions change."""

import hashlib
import logging
from abc import ABC, abstractmethod

from django.conf import settings
from django.core.cache import cache
from django.core.exceptions import ImproperlyConfigured

from freya_omnisend.contacts import contact_store_handler
from freya_omnisend.contacts.exceptions import ContactCreationError, ContactStoreError
from freya_omnisend.models import FormSyncSettings
from freya_omnisend.subscriptions import subscription_store_handler
from freya_omnisend.subscriptions.backends import Subscription
from freya_omnisend.subscriptions.enums import HANDLED_STATUSES
from freya_omnisend.subscriptions.exceptions import SubscriptionStoreError
from freya_omnisend.sync import tasks
from freya_omnisend.sync.conditions import should_skip
from freya_omnisend.sync.environment import is_production_environment
from freya_omnisend.sync.exceptions import PreconditionError
from freya_omnisend.sync.forms import build_contact
from freya_omnisend.sync.policy import SiblingScope, SubscriptionStatusPolicy
from freya_omnisend.sync.product_type import get_property_name, get_subscription_product_type
from freya_omnisend.sync.reconciler import ContactPropertyReconciler

logger = logging.getLogger(__name__)

PARTIAL_ENTRY_DELAY = 5
PARTIAL_ENTRY_DEDUPLICATION_TIMEOUT = 24 * 60 * 60


def partial_entry_deduplication_key(email, tag):
    """Return the cache key flagging a contact as already tagged for a campaign."""
    digest = hashlib.sha256(f"{email.lower()}{tag}".encode()).hexdigest()
    return f"freya_omnisend_partial_{digest}"


class ContactSyncPort(ABC):
    """Synchronization events the host forwards to Omnisend."""

    @abstractmethod
    def on_form_submitted(self, entry, form):
        """Send the contact of a completed form submission."""

    @abstractmethod
    def on_subscription_status_changed(self, subscription, new_status, old_status):
        """Update the subscription status property of the subscriber."""

    @abstractmethod
    def on_partial_entry_saved(self, partial_entry, form):
        """Tag the contact of an in-progress form."""

    def on_partial_entry_updated(self, partial_entry, form):
        """Tag the contact of an in-progress form, after a later save."""
        return self.on_partial_entry_saved(partial_entry, form)


class ContactSync(ContactSyncPort):
    """
    Best effort synchronization with Omnisend.

    Nothing raised here reaches the caller: a synchronization failure must never
    block the form submission or subscription change it reacts to.
    """

    def __init__(self, client=None, store=None, policy=None):
        """Initialize with explicit backends, or with the ones from the settings."""
        self._client = client
        self._store = store
        self._policy = policy

    @property
    def client(self):
        """Return the contact store backend."""
        if self._client is None:
            try:
                self._client = contact_store_handler()
            except (ImproperlyConfigured, ContactStoreError) as err:
                raise PreconditionError(f"Omnisend is not available: {err}") from err
        return self._client

    @property
    def store(self):
        """Return the subscription store backend."""
        if self._store is None:
            try:
                self._store = subscription_store_handler()
            except (ImproperlyConfigured, SubscriptionStoreError) as err:
                raise PreconditionError(f"WooCommerce Subscriptions is not available: {err}") from err
        return self._store

    @property
    def policy(self):
        """Return the status policy used for live events."""
        if self._policy is None:
            self._policy = SubscriptionStatusPolicy(self.store, sibling_scope=SiblingScope.ANY)
        return self._policy

    def on_form_submitted(self, entry, form):
        """Send the contact of a completed form submission, unless a condition suppresses it."""
        try:
            if not is_production_environment():
                logger.info("Not running on the production site, skipping form %s", form.id)
                return
            client = self.client

            form_settings = FormSyncSettings.objects.filter(form_id=form.id).first()
            if form_settings is None:
                return
            if should_skip(entry, form, form_settings.conditions):
                logger.info("Suppression condition matched, form %s entry not sent to Omnisend", form.id)
                return

            contact = build_contact(entry, form, form_settings)
            if contact is None:
                logger.info("Email is not mapped or empty on form %s, skipping contact creation", form.id)
                return
            client.create_contact(contact)
        except PreconditionError as err:
            logger.info("Skipping form %s: %s", form.id, err)
        except ContactCreationError as err:
            logger.warning("Error sending form %s contact to Omnisend: %s", form.id, err)
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected error synchronizing form %s", form.id)

    def on_subscription_status_changed(self, subscription, new_status, old_status):
        """Update the subscription status property of the subscriber."""
        logger.info("Status change triggered - new: %s, old: %s", new_status, old_status)
        try:
            if not is_production_environment():
                logger.info("Not running on the production site, skipping subscription status update")
                return
            store = self.store
            reconciler = ContactPropertyReconciler(self.client)

            if isinstance(subscription, str):
                if not subscription.strip().isdigit():
                    logger.info("Invalid subscription id %r", subscription)
                    return
                subscription = int(subscription)
            if isinstance(subscription, int):
                subscription = store.get_subscription(subscription)
            if not isinstance(subscription, Subscription):
                logger.info("Invalid subscription %r", subscription)
                return

            email = subscription.billing_email
            if not email:
                logger.info("No billing email found for subscription %s", subscription.id)
                return
            if new_status not in HANDLED_STATUSES:
                logger.info("Status not handled: %s", new_status)
                return

            property_name = get_property_name(get_subscription_product_type(subscription, store))
            value = self.policy.determine_status(subscription, email, new_status)
            reconciler.update_property(email, property_name, value)
        except PreconditionError as err:
            logger.info("Skipping subscription status change: %s", err)
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected error synchronizing subscription status")

    def on_partial_entry_saved(self, partial_entry, form):
        """Schedule the tagging of the contact of the configured in-progress form, once a day at most."""
        try:
            config = getattr(settings, "FREYA_OMNISEND_PARTIAL_ENTRY", None)
            if not config or form.id != int(config["FORM_ID"]):
                return
            if not is_production_environment():
                logger.info("Not running on the production site, skipping partial entry of form %s", form.id)
                return

            email = (partial_entry.get(str(config["EMAIL_FIELD_ID"])) or "").strip()
            if not email:
                return
            tag = config["TAG"]
            first_name_field = config.get("FIRST_NAME_FIELD_ID")
            first_name = partial_entry.get(str(first_name_field), "") if first_name_field else ""

            key = partial_entry_deduplication_key(email, tag)
            timeout = config.get("DEDUPLICATION_TIMEOUT", PARTIAL_ENTRY_DEDUPLICATION_TIMEOUT)
            if not cache.add(key, True, timeout=timeout):
                logger.info("Contact %s already tagged with %s", email, tag)
                return

            try:
                tasks.tag_partial_entry_contact.apply_async(
                    kwargs={"email": email, "tag": tag, "first_name": first_name},
                    countdown=config.get("DELAY", PARTIAL_ENTRY_DELAY),
                )
            except Exception:
                # Release the flag so a later save can schedule the tagging again
                cache.delete(key)
                raise
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected error handling partial entry of form %s", form.id)


contact_sync = ContactSync()
