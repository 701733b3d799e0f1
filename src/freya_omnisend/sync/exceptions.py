"""Synchronization exceptions module."""


class SyncError(Exception):
    """Base exception for all synchronization exceptions."""


class PreconditionError(SyncError):
    """Exception raised when a required service is not available."""


class EnvironmentGuardError(PreconditionError):
    """Exception raised when live changes are attempted outside production."""
