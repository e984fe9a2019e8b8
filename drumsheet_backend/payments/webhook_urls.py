# payments/webhook_urls.py

from django.urls import path

from payments.views import DodoWebhookView

urlpatterns = [
    path("dodo-payments/", DodoWebhookView.as_view(), name="dodo-webhook"),
]
