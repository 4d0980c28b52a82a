"""
URL configuration for checkout API endpoints.
"""

from django.urls import path

from api.v1.checkout import views

app_name = "checkout"

urlpatterns = [
    path(
        "checkout-session",
        views.CreateCheckoutSessionView.as_view(),
        name="checkout-session",
    ),
]
