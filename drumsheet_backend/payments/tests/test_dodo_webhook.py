# payments/tests/test_dodo_webhook.py

import json
import time

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from catalog.models import DrumSheet
from orders.models import Order, OrderItem, PaymentTransaction, Purchase
from payments.services.dodo import sign_webhook

User = get_user_model()

TEST_WEBHOOK_SECRET = "whsec_ZG9kby13ZWJob29rLXRlc3Qtc2VjcmV0"


class DodoWebhookTests(TestCase):
    """
    GUARANTEES:
    - Unsigned / badly signed requests -> 401, nothing changes
    - Signed non-JSON -> 400
    - payment.succeeded completes the order once
    - payment.failed marks pending orders failed, never paid ones
    - refund.succeeded marks the order refunded and revokes its downloads
    - Unknown events and unknown orders are acknowledged (200)
    """

    def setUp(self):
        self.client = APIClient()
        self.url = reverse("dodo-webhook")
        self.user = User.objects.create_user(email="buyer@example.com", password="pass")
        self.sheet = DrumSheet.objects.create(title="Groove", artist="Funk", price=3000)
        self.order = Order.objects.create(user=self.user, total_amount=3000)
        OrderItem.objects.create(order=self.order, drum_sheet=self.sheet, sheet_title="Groove", price=3000)
        PaymentTransaction.objects.create(order=self.order, user=self.user, provider="dodo", amount=3000)

    def _send(self, payload, *, signature=None):
        body = payload if isinstance(payload, str) else json.dumps(payload)
        timestamp = str(int(time.time()))
        if signature is None:
            signature = sign_webhook(
                secret=TEST_WEBHOOK_SECRET,
                webhook_id="msg_1",
                timestamp=timestamp,
                body=body.encode("utf-8"),
            )
        return self.client.post(
            self.url,
            data=body,
            content_type="application/json",
            HTTP_WEBHOOK_ID="msg_1",
            HTTP_WEBHOOK_TIMESTAMP=timestamp,
            HTTP_WEBHOOK_SIGNATURE=signature,
        )

    def _event(self, event_type, order_id=None, **data):
        return {
            "type": event_type,
            "data": {"payment_id": "dodo-pay-1", "metadata": {"order_id": str(order_id or self.order.id)}, **data},
        }

    def test_bad_signature_is_401(self):
        res = self._send(self._event("payment.succeeded"), signature="v1,AAAA")

        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(res.data["error"], "Invalid signature")
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PENDING)

    def test_missing_headers_is_401(self):
        res = self.client.post(self.url, data="{}", content_type="application/json")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_invalid_json_is_400(self):
        res = self._send("not json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"], "Invalid payload")

    def test_payment_succeeded_completes_order(self):
        res = self._send(self._event("payment.succeeded"))
        self._send(self._event("payment.succeeded"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PAID)
        self.assertEqual(self.order.payment_method, "dodo")
        self.assertEqual(self.order.transaction_id, "dodo-pay-1")
        self.assertEqual(Purchase.objects.filter(order=self.order).count(), 1)
        self.assertEqual(PaymentTransaction.objects.get(order=self.order).status, PaymentTransaction.STATUS_PAID)

    def test_order_id_from_camel_case_metadata(self):
        payload = {"type": "payment.succeeded", "data": {"payment_id": "p", "metadata": {"orderId": str(self.order.id)}}}
        self._send(payload)
        self.order.refresh_from_db()
        self.assertTrue(self.order.is_paid)

    def test_payment_failed(self):
        res = self._send(self._event("payment.failed"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_FAILED)
        self.assertEqual(PaymentTransaction.objects.get(order=self.order).status, PaymentTransaction.STATUS_FAILED)

    def test_failure_after_success_is_ignored(self):
        self._send(self._event("payment.succeeded"))
        self._send(self._event("payment.failed"))

        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PAID)

    def test_refund_succeeded(self):
        self.sheet.pdf_url = "https://cdn.example.com/g.pdf"
        self.sheet.save(update_fields=["pdf_url"])
        self._send(self._event("payment.succeeded"))
        res = self._send(self._event("refund.succeeded"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_REFUNDED)
        self.assertEqual(self.order.payment_status, Order.PAYMENT_REFUNDED)
        self.assertEqual(PaymentTransaction.objects.get(order=self.order).status, PaymentTransaction.STATUS_REFUNDED)
        self.assertFalse(Purchase.objects.filter(order=self.order).exists())

        buyer = APIClient()
        buyer.force_authenticate(self.user)
        download = buyer.get(reverse("purchase-download", kwargs={"sheet_id": self.sheet.id}))
        self.assertEqual(download.status_code, status.HTTP_403_FORBIDDEN)

    def test_unhandled_event_is_acknowledged(self):
        res = self._send({"type": "subscription.active", "data": {}})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data, {"received": True})

    def test_unknown_order_is_acknowledged(self):
        res = self._send(self._event("payment.succeeded", order_id="00000000-0000-0000-0000-000000000001"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["detail"], "Unknown order")
