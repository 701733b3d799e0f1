"""Per-user record of the subscriptions already reconciled by the batch job."""

from django.contrib.auth import get_user_model
from django.db import transaction

from freya_omnisend.models import ProcessedSubscriptions


class ProcessedMarker:
    """Checkpoint surviving restarts, stored on the user owning the billing email."""

    def _get_user(self, email):
        if not email:
            return None
        return get_user_model().objects.filter(email__iexact=email).order_by("pk").first()

    def is_processed(self, email, subscription_id):
        """Tell whether the subscription was already reconciled."""
        user = self._get_user(email)
        if user is None:
            return False
        marker = ProcessedSubscriptions.objects.filter(user=user).first()
        return marker is not None and subscription_id in marker.subscription_ids

    def mark_processed(self, email, subscription_id):
        """
        Append the subscription to the user checkpoint.

        Returns:
            bool: False when no user owns the email, nothing is stored then

        """
        user = self._get_user(email)
        if user is None:
            return False
        with transaction.atomic():
            marker, _created = ProcessedSubscriptions.objects.select_for_update().get_or_create(user=user)
            if subscription_id not in marker.subscription_ids:
                marker.subscription_ids.append(subscription_id)
                marker.save(update_fields=["subscription_ids"])
        return True
