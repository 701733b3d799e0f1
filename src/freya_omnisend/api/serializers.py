"""Serializers of the form sync settings API."""

from rest_framework import serializers

from freya_omnisend.sync.conditions import ConditionOperator
from freya_omnisend.sync.forms import UNMAPPED


class SuppressionConditionSerializer(serializers.Serializer):
    """A single suppression condition."""

    field_id = serializers.CharField(allow_blank=True, required=False, default="")
    operator = serializers.CharField(allow_blank=True, required=False, default="")
    value = serializers.CharField(allow_blank=True, required=False, default="")

    def validate_operator(self, value):
        """Refuse operators the evaluation does not know."""
        if value and value not in {operator.value for operator in ConditionOperator}:
            raise serializers.ValidationError(f"Unknown operator {value!r}.")
        return value


class FormConditionsSerializer(serializers.Serializer):
    """Ordered suppression conditions of a form."""

    conditions = SuppressionConditionSerializer(many=True, required=False, default=list)

    def validate_conditions(self, conditions):
        """Drop the incomplete rows, left as placeholders by the settings page."""
        return [
            condition
            for condition in conditions
            if condition["field_id"] and condition["field_id"] != UNMAPPED and condition["operator"]
        ]
