import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="FormSyncSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("form_id", models.PositiveIntegerField(unique=True, verbose_name="form id")),
                (
                    "field_mapping",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Contact attribute name to form field id, '-1' when not mapped.",
                        verbose_name="field mapping",
                    ),
                ),
                (
                    "conditions",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="If any of these conditions matches, the contact is not sent to Omnisend.",
                        verbose_name="suppression conditions",
                    ),
                ),
                ("send_welcome_email", models.BooleanField(default=False, verbose_name="send welcome email")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "form sync settings",
                "verbose_name_plural": "form sync settings",
            },
        ),
        migrations.CreateModel(
            name="ProcessedSubscriptions",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("subscription_ids", models.JSONField(blank=True, default=list, verbose_name="subscription ids")),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="omnisend_processed_subscriptions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "processed subscriptions",
                "verbose_name_plural": "processed subscriptions",
            },
        ),
    ]
