"""Views of the form sync settings API."""

import logging

from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from freya_omnisend.models import FormSyncSettings

from . import serializers

logger = logging.getLogger(__name__)


class FormConditionsView(APIView):
    """Read or replace the suppression conditions of a form."""

    permission_classes = [permissions.IsAdminUser]

    def get(self, request, form_id):
        """Return the conditions of the form."""
        form_settings = FormSyncSettings.objects.filter(form_id=form_id).first()
        conditions = form_settings.conditions if form_settings else []
        return Response({"conditions": conditions})

    def put(self, request, form_id):
        """Replace the conditions of the form."""
        serializer = serializers.FormConditionsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        conditions = [dict(condition) for condition in serializer.validated_data["conditions"]]
        FormSyncSettings.objects.update_or_create(form_id=form_id, defaults={"conditions": conditions})
        logger.info("Saved %d condition(s) for form %s", len(conditions), form_id)
        return Response({"conditions": conditions}, status=status.HTTP_200_OK)
