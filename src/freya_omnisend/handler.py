"""Backend handler shared by the contact and subscription stores."""

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.functional import cached_property
from django.utils.module_loading import import_string


class BackendHandler:
    """Handler managing the instantiation of a backend configured in the settings."""

    setting_name = None
    invalid_backend_error = ImproperlyConfigured

    def __init__(self, backend=None):
        """Initialize the backend handler."""
        # backend is an optional dict of backend definitions
        # (structured like the dict found under `setting_name`).
        self._backend = backend
        self._instance = None

    @cached_property
    def backend(self):
        """Put in cache the backend properties from the settings."""
        if self._backend is None:
            try:
                self._backend = getattr(settings, self.setting_name).copy()
            except AttributeError as e:
                raise ImproperlyConfigured(f"settings.{self.setting_name} is not configured") from e
        return self._backend

    def __call__(self):
        """Create if not existing the backend and then return it."""
        if self._instance is None:
            self._instance = self.create_backend(self.backend)
        return self._instance

    def create_backend(self, params):
        """Instantiate and configure the backend."""
        params = params.copy()
        backend = params.pop("BACKEND")
        parameters = params.pop("PARAMETERS", {})
        try:
            klass = import_string(backend)
        except ImportError as e:
            raise self.invalid_backend_error(f"Could not find backend {backend!r}: {e}") from e
        return klass(**parameters)
