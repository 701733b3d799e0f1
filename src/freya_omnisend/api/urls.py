"""Form sync settings API URLs."""

from django.urls import path

from .views import FormConditionsView

urlpatterns = [
    path("forms/<int:form_id>/conditions/", FormConditionsView.as_view(), name="form-conditions"),
]
