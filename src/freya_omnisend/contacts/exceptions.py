"""Contact store exceptions module."""


class ContactStoreError(Exception):
    """Base exception for all contact store exceptions."""


class InvalidBackendError(ContactStoreError):
    """Exception raised when the backend is invalid."""


class ContactRetrievalError(ContactStoreError):
    """Exception raised when fetching a contact fails."""


class ContactCreationError(ContactStoreError):
    """Exception raised when the contact creation fails."""
