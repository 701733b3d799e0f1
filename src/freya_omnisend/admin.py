"""Admin of the Omnisend synchronization app."""

from django.contrib import admin

from . import models


@admin.register(models.FormSyncSettings)
class FormSyncSettingsAdmin(admin.ModelAdmin):
    """Edit the field mapping and suppression conditions of forms."""

    list_display = ("form_id", "send_welcome_email", "updated_at")
    search_fields = ("form_id",)


@admin.register(models.ProcessedSubscriptions)
class ProcessedSubscriptionsAdmin(admin.ModelAdmin):
    """Inspect the backfill checkpoints."""

    list_display = ("user",)
    raw_id_fields = ("user",)
