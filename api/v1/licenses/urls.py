"""
URL configuration for license API endpoints.
"""

from django.urls import path

from api.v1.licenses import views

app_name = "licenses"

urlpatterns = [
    path(
        "validate",
        views.ValidateLicenseView.as_view(),
        name="validate-license",
    ),
]
