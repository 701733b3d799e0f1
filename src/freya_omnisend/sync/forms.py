"""Forms, form entries and their mapping to Omnisend contacts."""

from dataclasses import dataclass, field, fields

from freya_omnisend.contacts.backends import Contact

# Field types whose value is spread over several sub-inputs
MULTI_INPUT_TYPES = ("checkbox", "multi_choice")

CUSTOM_PROPERTY_PREFIX = "gravity_forms_"

CONSENT_SOURCE = "gravity-forms"

UNMAPPED = "-1"


@dataclass
class FormInput:
    """Sub-input of a form field, a checkbox choice for instance."""

    id: str
    label: str = ""


@dataclass
class FormField:
    """Field of a form."""

    id: str
    type: str
    label: str = ""
    inputs: list[FormInput] = field(default_factory=list)

    @property
    def is_multi_input(self):
        """Tell whether the value of this field is the set of its sub-input values."""
        return self.type in MULTI_INPUT_TYPES


@dataclass
class Form:
    """Form definition, as delivered with a submission."""

    id: int
    title: str = ""
    fields: list[FormField] = field(default_factory=list)

    def get_field(self, field_id):
        """Return the field with the given id, None if there is none."""
        field_id = str(field_id)
        return next((form_field for form_field in self.fields if form_field.id == field_id), None)

    @classmethod
    def from_dict(cls, data):
        """Build a form from its JSON representation."""
        return cls(
            id=int(data["id"]),
            title=data.get("title", ""),
            fields=[
                FormField(
                    id=str(form_field["id"]),
                    type=form_field.get("type", ""),
                    label=form_field.get("label", ""),
                    inputs=[
                        FormInput(
                            id=str(form_input["id"]),
                            label=form_input.get("label", ""),
                        )
                        for form_input in form_field.get("inputs") or []
                    ],
                )
                for form_field in data.get("fields") or []
            ],
        )


@dataclass
class MappedContactFields:
    """Contact attributes read from an entry through a field mapping."""

    email: str = ""
    address: str = ""
    country: str = ""
    city: str = ""
    state: str = ""
    first_name: str = ""
    last_name: str = ""
    birthday: str = ""
    phone_number: str = ""
    postal_code: str = ""
    email_consent: bool = False
    phone_consent: bool = False


@dataclass
class FieldMapping:
    """Form field id used for each contact attribute, None when not mapped."""

    email: str | None = None
    address: str | None = None
    country: str | None = None
    city: str | None = None
    state: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    birthday: str | None = None
    phone_number: str | None = None
    postal_code: str | None = None
    email_consent: str | None = None
    phone_consent: str | None = None

    @classmethod
    def from_settings(cls, mapping):
        """Build the mapping from stored settings, where "-1" means not mapped."""
        values = {}
        for mapping_field in fields(cls):
            field_id = mapping.get(mapping_field.name)
            if field_id in (None, "", UNMAPPED):
                continue
            values[mapping_field.name] = str(field_id)
        return cls(**values)

    def mapped_field_ids(self):
        """Return the ids of the form fields used by the mapping."""
        return {getattr(self, f.name) for f in fields(self)} - {None}

    def resolve(self, entry):
        """Read the mapped contact attributes from an entry."""
        resolved = MappedContactFields()
        for mapping_field in fields(self):
            field_id = getattr(self, mapping_field.name)
            if field_id is None:
                continue
            if mapping_field.name in ("email_consent", "phone_consent"):
                setattr(resolved, mapping_field.name, entry.get(field_id) == "1")
            else:
                setattr(resolved, mapping_field.name, entry.get(field_id) or "")
        return resolved


def map_custom_properties(form, entry, mapping, contact):
    """Add every answer not used by the field mapping as a custom property."""
    mapped = mapping.mapped_field_ids()
    for form_field in form.fields:
        if form_field.id in mapped:
            continue
        key = CUSTOM_PROPERTY_PREFIX + form_field.label.replace(" ", "_").lower()
        if form_field.type != "checkbox":
            if entry.get(form_field.id):
                contact.add_custom_property(key, entry[form_field.id])
            continue

        selected_choices = [form_input.label for form_input in form_field.inputs if entry.get(form_input.id)]
        if selected_choices:
            contact.add_custom_property(key, selected_choices)


def build_contact(entry, form, form_settings):
    """
    Build the Omnisend contact of a form submission.

    Returns:
        Contact | None: The contact, None when no email is mapped or answered

    """
    mapping = FieldMapping.from_settings(form_settings.field_mapping or {})
    mapped = mapping.resolve(entry)
    if not mapped.email:
        return None

    contact = Contact(
        email=mapped.email,
        first_name=mapped.first_name,
        last_name=mapped.last_name,
        birthday=mapped.birthday,
        postal_code=mapped.postal_code,
        address=mapped.address,
        state=mapped.state,
        country=mapped.country,
        city=mapped.city,
    )
    if mapped.phone_number:
        contact.phone = mapped.phone_number
    contact.add_tag("gravity_forms")
    contact.add_tag(f"gravity_forms {form.title}")

    if mapped.email_consent:
        contact.email_consent = CONSENT_SOURCE
        contact.email_opt_in = CONSENT_SOURCE
    if mapped.phone_consent:
        contact.phone_consent = CONSENT_SOURCE
        contact.phone_opt_in = CONSENT_SOURCE

    contact.send_welcome_email = form_settings.send_welcome_email
    map_custom_properties(form, entry, mapping, contact)
    return contact
