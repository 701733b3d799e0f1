"""Contact store backend base module."""

from abc import ABC, abstractmethod

from freya_omnisend.contacts.backends import Contact


class BaseBackend(ABC):
    """Base class for all contact store backends."""

    @abstractmethod
    def get_contact_by_email(self, email: str, timeout: int = None) -> Contact | None:
        """
        Fetch a contact by its email.

        Args:
            email: Email identifying the contact
            timeout: API request timeout in seconds

        Returns:
            Contact | None: The contact, None if it does not exist

        Raises:
            ContactRetrievalError: If the contact cannot be fetched

        """

    @abstractmethod
    def create_contact(self, contact: Contact, timeout: int = None) -> dict:
        """
        Create a contact, or update it in place when the email is already known.

        Args:
            contact: Contact information and properties
            timeout: API request timeout in seconds

        Returns:
            dict: Service response

        Raises:
            ContactCreationError: If contact creation fails

        """
