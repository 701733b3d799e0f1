"""Omnisend contact store module."""

from django.utils.functional import LazyObject

from .handler import ContactStoreHandler


class DefaultContactStore(LazyObject):
    """Lazy object to handle the contact store backend."""

    def _setup(self):
        """Configure the contact store backend."""
        self._wrapped = contact_store_handler()


contact_store_handler = ContactStoreHandler()
contact_store = DefaultContactStore()
