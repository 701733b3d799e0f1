"""Contact store backends module."""

import re
from dataclasses import dataclass, field

_INVALID_PROPERTY_KEY_CHARS = re.compile(r"[^A-Za-z0-9_]")


def clean_up_property_key(key: str) -> str:
    """Make a custom property key acceptable to Omnisend."""
    return _INVALID_PROPERTY_KEY_CHARS.sub("", str(key).replace(" ", "_"))


@dataclass
class Contact:
    """Contact data exchanged with the CRM, identified by its email."""

    email: str
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    birthday: str = ""
    postal_code: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    tags: list[str] = field(default_factory=list)
    custom_properties: dict[str, str | list[str]] = field(default_factory=dict)
    email_consent: str | None = None
    email_opt_in: str | None = None
    phone_consent: str | None = None
    phone_opt_in: str | None = None
    send_welcome_email: bool = False

    def add_custom_property(self, key, value, clean_up_key=True):
        """Set a custom property, overwriting any previous value for the key."""
        if clean_up_key:
            key = clean_up_property_key(key)
        self.custom_properties[key] = value

    def add_tag(self, tag):
        """Add a tag once."""
        if tag and tag not in self.tags:
            self.tags.append(tag)
