"""
URL configuration for payment processor webhooks.
"""

from django.urls import path

from api.webhooks import views

app_name = "webhooks"

urlpatterns = [
    path(
        "payment-events",
        views.PaymentEventWebhookView.as_view(),
        name="payment-events",
    ),
]
