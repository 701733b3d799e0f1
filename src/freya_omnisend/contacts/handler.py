"""Contact store backend handler."""

from freya_omnisend.contacts.exceptions import InvalidBackendError
from freya_omnisend.handler import BackendHandler


class ContactStoreHandler(BackendHandler):
    """Handler instantiating the backend defined in settings.FREYA_OMNISEND_CONTACTS."""

    setting_name = "FREYA_OMNISEND_CONTACTS"
    invalid_backend_error = InvalidBackendError
