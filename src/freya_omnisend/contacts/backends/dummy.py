"""Dummy contact store backend."""

from freya_omnisend.contacts.backends import Contact

from .base import BaseBackend


class DummyBackend(BaseBackend):
    """Dummy contact store backend doing nothing."""

    def get_contact_by_email(self, email: str, timeout: int = None) -> Contact | None:
        """Never find any contact."""
        return None

    def create_contact(self, contact: Contact, timeout: int = None) -> dict:
        """Create or update a contact."""
        return {}
