"""Omnisend contact store integration."""

import logging

import requests

from freya_omnisend.contacts.backends import Contact
from freya_omnisend.contacts.exceptions import ContactCreationError, ContactRetrievalError

from .base import BaseBackend

logger = logging.getLogger(__name__)

# Contact attributes sent as-is, mapped to their Omnisend API name.
CONTACT_ATTRIBUTES = {
    "first_name": "firstName",
    "last_name": "lastName",
    "birthday": "birthdate",
    "postal_code": "postalCode",
    "address": "address",
    "city": "city",
    "state": "state",
    "country": "country",
}


def _identifier(identifier_type, identifier_id, consent, opt_in):
    """Build an Omnisend contact identifier."""
    identifier = {"type": identifier_type, "id": identifier_id}
    if opt_in:
        identifier["channels"] = {identifier_type: {"status": "subscribed"}}
    if consent:
        identifier["consent"] = {"source": consent}
    return identifier


def contact_to_payload(contact: Contact) -> dict:
    """Serialize a contact for the Omnisend contacts endpoint, leaving out empty values."""
    identifiers = [_identifier("email", contact.email, contact.email_consent, contact.email_opt_in)]
    if contact.phone:
        identifiers.append(_identifier("phone", contact.phone, contact.phone_consent, contact.phone_opt_in))

    payload = {"identifiers": identifiers}
    for attribute, api_name in CONTACT_ATTRIBUTES.items():
        value = getattr(contact, attribute)
        if value:
            payload[api_name] = value
    if contact.tags:
        payload["tags"] = list(contact.tags)
    if contact.custom_properties:
        payload["customProperties"] = dict(contact.custom_properties)
    if contact.send_welcome_email:
        payload["sendWelcomeEmail"] = True
    return payload


def contact_from_payload(data: dict) -> Contact:
    """Build a contact from an Omnisend API contact representation."""
    phone = next(
        (identifier.get("id", "") for identifier in data.get("identifiers", []) if identifier.get("type") == "phone"),
        "",
    )
    contact = Contact(
        email=data.get("email", ""),
        phone=phone or "",
        tags=list(data.get("tags") or []),
        custom_properties=dict(data.get("customProperties") or {}),
    )
    for attribute, api_name in CONTACT_ATTRIBUTES.items():
        setattr(contact, attribute, data.get(api_name) or "")
    return contact


class OmnisendBackend(BaseBackend):
    """
    Omnisend contact store integration.

    Omnisend has no partial update: posting a contact for a known email replaces
    its properties, callers are expected to send the full property set.
    """

    base_url = "https://api.omnisend.com/v5"

    def __init__(self, api_key: str, timeout: int = 10):
        """Configure the Omnisend backend."""
        self._api_key = api_key
        self._timeout = timeout

    @property
    def _headers(self):
        return {"X-API-KEY": self._api_key, "Accept": "application/json"}

    def get_contact_by_email(self, email: str, timeout: int = None) -> Contact | None:
        """
        Fetch an Omnisend contact by email.

        Raises:
            ContactRetrievalError: If the Omnisend API cannot be reached or answers with an error

        """
        try:
            response = requests.get(
                f"{self.base_url}/contacts",
                params={"email": email},
                headers=self._headers,
                timeout=timeout or self._timeout,
            )
            response.raise_for_status()
            contacts = response.json().get("contacts") or []
        except (requests.RequestException, ValueError) as err:
            raise ContactRetrievalError(f"Failed to fetch contact {email} from Omnisend") from err

        if not contacts:
            return None
        return contact_from_payload(contacts[0])

    def create_contact(self, contact: Contact, timeout: int = None) -> dict:
        """
        Create or update an Omnisend contact.

        Raises:
            ContactCreationError: If contact creation fails

        """
        try:
            response = requests.post(
                f"{self.base_url}/contacts",
                json=contact_to_payload(contact),
                headers=self._headers,
                timeout=timeout or self._timeout,
            )
            response.raise_for_status()
        except requests.RequestException as err:
            raise ContactCreationError("Failed to create contact in Omnisend") from err

        logger.debug("Omnisend contact %s saved", contact.email)
        try:
            return response.json()
        except ValueError:
            return {}
