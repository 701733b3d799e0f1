"""Read-modify-write of Omnisend contact properties."""

import logging

from freya_omnisend.contacts.backends import Contact
from freya_omnisend.contacts.exceptions import ContactCreationError, ContactRetrievalError

logger = logging.getLogger(__name__)


class ContactPropertyReconciler:
    """
    Update properties of Omnisend contacts without losing the other ones.

    Omnisend only offers a full upsert: the existing contact is fetched, its
    custom properties copied, and the whole set written back. Two writers on the
    same email may race, the last write wins on the whole property set.
    """

    def __init__(self, client):
        """Initialize the reconciler with a contact store backend."""
        self.client = client

    def fetch_existing(self, email):
        """Return the existing contact, None if missing or if it cannot be fetched."""
        try:
            return self.client.get_contact_by_email(email)
        except ContactRetrievalError as err:
            logger.warning("Could not retrieve existing contact %s: %s", email, err)
            return None

    def contact_exists(self, email):
        """Tell whether Omnisend knows the contact, errors count as not found."""
        return self.fetch_existing(email) is not None

    def merge(self, email, existing=None):
        """Return a new contact carrying the custom properties of the existing one."""
        contact = Contact(email=email)
        if existing is not None:
            for key, value in existing.custom_properties.items():
                contact.add_custom_property(key, value, clean_up_key=False)
        return contact

    def save(self, contact):
        """Upsert a contact, return False when Omnisend refused it."""
        try:
            self.client.create_contact(contact)
        except ContactCreationError as err:
            logger.error("Error updating contact %s: %s", contact.email, err)
            return False
        return True

    def update_property(self, email, property_name, property_value):
        """
        Set a custom property on a contact, keeping its other properties.

        Returns:
            bool: True when the contact was written

        """
        if property_value is None:
            logger.info("Skipping property update for %s, no value to set", email)
            return False

        contact = self.merge(email, self.fetch_existing(email))
        contact.add_custom_property(property_name, property_value)
        if not self.save(contact):
            return False

        logger.info("Updated contact %s with property %s = %s", email, property_name, property_value)
        return True

    def add_tag(self, email, tag, first_name=""):
        """Tag a contact, keeping its existing tags and properties."""
        existing = self.fetch_existing(email)
        contact = self.merge(email, existing)
        if existing is not None:
            for existing_tag in existing.tags:
                contact.add_tag(existing_tag)
        contact.add_tag(tag)
        if first_name:
            contact.first_name = first_name
        if not self.save(contact):
            return False

        logger.info("Tagged contact %s with %s", email, tag)
        return True
