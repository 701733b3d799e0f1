"""Deferred synchronization tasks."""

from celery import shared_task

from freya_omnisend.contacts import contact_store
from freya_omnisend.sync.reconciler import ContactPropertyReconciler


@shared_task
def tag_partial_entry_contact(email: str, tag: str, first_name: str = ""):
    """Tag the contact of a partial entry, keeping its tags and properties."""
    return ContactPropertyReconciler(contact_store).add_tag(email, tag, first_name=first_name)
