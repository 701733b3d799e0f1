"""Freya Omnisend application configuration."""

from django.apps import AppConfig


class FreyaOmnisendConfig(AppConfig):
    """Configuration class for the Omnisend synchronization app."""

    name = "freya_omnisend"
    verbose_name = "Freya Omnisend"
    default_auto_field = "django.db.models.BigAutoField"
