"""Models of the Omnisend synchronization app."""

from django.conf import settings
from django.db import models


class FormSyncSettings(models.Model):
    """Omnisend settings of a form: field mapping and suppression conditions."""

    form_id = models.PositiveIntegerField("form id", unique=True)
    field_mapping = models.JSONField(
        "field mapping",
        default=dict,
        blank=True,
        help_text="Contact attribute name to form field id, '-1' when not mapped.",
    )
    conditions = models.JSONField(
        "suppression conditions",
        default=list,
        blank=True,
        help_text="If any of these conditions matches, the contact is not sent to Omnisend.",
    )
    send_welcome_email = models.BooleanField("send welcome email", default=False)
    updated_at = models.DateTimeField("updated at", auto_now=True)

    class Meta:  # noqa: D106
        verbose_name = "form sync settings"
        verbose_name_plural = "form sync settings"

    def __str__(self):
        """Return a string representation of the form settings."""
        return f"Form {self.form_id}"


class ProcessedSubscriptions(models.Model):
    """Subscriptions of a user already reconciled by the batch job."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="omnisend_processed_subscriptions",
    )
    subscription_ids = models.JSONField("subscription ids", default=list, blank=True)

    class Meta:  # noqa: D106
        verbose_name = "processed subscriptions"
        verbose_name_plural = "processed subscriptions"

    def __str__(self):
        """Return a string representation of the checkpoint."""
        return f"{self.user_id}: {len(self.subscription_ids)} subscription(s)"
