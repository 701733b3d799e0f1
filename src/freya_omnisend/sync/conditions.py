"""Suppression conditions preventing a form submission from reaching Omnisend."""

import logging
from dataclasses import dataclass
from enum import StrEnum

logger = logging.getLogger(__name__)


class ConditionOperator(StrEnum):
    """Operators available in suppression conditions."""

    IS = "is"
    IS_NOT = "is_not"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    EMPTY = "empty"
    NOT_EMPTY = "not_empty"


@dataclass
class SuppressionCondition:
    """Rule suppressing the synchronization of a submission when it matches."""

    field_id: str = ""
    operator: str = ""
    value: str = ""

    @classmethod
    def from_dict(cls, data):
        """Build a condition from its stored representation."""
        return cls(
            field_id=str(data.get("field_id") or ""),
            operator=data.get("operator") or "",
            value=str(data.get("value") or ""),
        )


def get_field_value(entry, form, field_id):
    """
    Return the value of a field in an entry.

    Checkbox-like fields give the list of their non-empty sub-input values, other
    fields their single value, an empty string if missing.
    """
    form_field = form.get_field(field_id)
    if form_field is not None and form_field.is_multi_input:
        if not form_field.inputs:
            return ""
        return [entry[form_input.id] for form_input in form_field.inputs if entry.get(form_input.id)]
    return entry.get(str(field_id), "")


def _contains(field_value, value):
    if isinstance(field_value, list):
        return any(value in str(item) for item in field_value)
    return value in str(field_value)


def condition_matches(condition, entry, form):
    """Tell whether a single condition matches an entry."""
    if not condition.field_id or not condition.operator:
        return False

    field_value = get_field_value(entry, form, condition.field_id)
    value = condition.value
    is_list = isinstance(field_value, list)

    match condition.operator:
        case ConditionOperator.IS:
            return value in field_value if is_list else str(field_value) == value
        case ConditionOperator.IS_NOT:
            return value not in field_value if is_list else str(field_value) != value
        case ConditionOperator.CONTAINS:
            return _contains(field_value, value)
        case ConditionOperator.NOT_CONTAINS:
            return not _contains(field_value, value)
        case ConditionOperator.EMPTY:
            return not field_value
        case ConditionOperator.NOT_EMPTY:
            return bool(field_value)
    return False


def should_skip(entry, form, conditions):
    """
    Evaluate the suppression conditions of a form against an entry.

    Conditions are OR'ed: the first one matching suppresses the synchronization.

    Returns:
        bool: True if the contact must NOT be sent to Omnisend

    """
    for condition in conditions or []:
        if isinstance(condition, dict):
            condition = SuppressionCondition.from_dict(condition)
        if condition_matches(condition, entry, form):
            logger.info(
                "Condition matched on form %s: field %s %s %r",
                form.id,
                condition.field_id,
                condition.operator,
                condition.value,
            )
            return True
    return False
