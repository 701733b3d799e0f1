"""Subscription store exceptions module."""


class SubscriptionStoreError(Exception):
    """Base exception for all subscription store exceptions."""


class InvalidBackendError(SubscriptionStoreError):
    """Exception raised when the backend is invalid."""
