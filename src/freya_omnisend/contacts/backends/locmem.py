"""In-memory contact store backend, for tests and local development."""

import copy

from freya_omnisend.contacts.backends import Contact

from .base import BaseBackend

# Contacts written by every LocMemBackend instance, keyed by lower-cased email.
contacts = {}


class LocMemBackend(BaseBackend):
    """Contact store keeping contacts in a module level dict."""

    def get_contact_by_email(self, email: str, timeout: int = None) -> Contact | None:
        """Return a copy of the stored contact."""
        contact = contacts.get(email.lower())
        return copy.deepcopy(contact) if contact is not None else None

    def create_contact(self, contact: Contact, timeout: int = None) -> dict:
        """Store the contact, replacing any previous one with the same email."""
        contacts[contact.email.lower()] = copy.deepcopy(contact)
        return {"email": contact.email}
