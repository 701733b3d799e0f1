"""Subscription store backend handler."""

from freya_omnisend.handler import BackendHandler
from freya_omnisend.subscriptions.exceptions import InvalidBackendError


class SubscriptionStoreHandler(BackendHandler):
    """Handler instantiating the backend defined in settings.FREYA_OMNISEND_SUBSCRIPTIONS."""

    setting_name = "FREYA_OMNISEND_SUBSCRIPTIONS"
    invalid_backend_error = InvalidBackendError
