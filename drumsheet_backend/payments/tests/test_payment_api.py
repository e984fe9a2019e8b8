# payments/tests/test_payment_api.py

import os
import uuid
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from catalog.models import DrumSheet
from orders.models import Order, OrderItem, PaymentTransaction, Purchase
from payments.services.exceptions import PaymentProviderError

User = get_user_model()


def _pending_order(user, sheet):
    order = Order.objects.create(user=user, total_amount=sheet.price, metadata={"description": sheet.title})
    OrderItem.objects.create(order=order, drum_sheet=sheet, sheet_title=sheet.title, price=sheet.price)
    return order


def _portone_payment(status_value, total=3000, **extra):
    payment = {
        "id": "pay-1",
        "transaction_id": "tx-1",
        "status": status_value,
        "amount": {"total": total, "currency": "CURRENCY_KRW"},
        "order_name": "Groove",
        "metadata": {},
        "customer": {},
        "virtual_account": None,
        "raw": {"payment": {"id": "pay-1"}},
    }
    payment.update(extra)
    return payment


@mock.patch("payments.services.portone.get_payment")
class PortOneVerifyTests(TestCase):
    """
    GUARANTEES:
    - PAID with a matching amount completes the order
    - Amount mismatch -> 400, order untouched
    - Virtual account issued -> awaiting_deposit with account details
    - Other statuses -> 400
    - Unknown order is created from PortOne metadata when possible
    - PortOne outage -> 502
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="buyer@example.com", password="pass")
        self.sheet = DrumSheet.objects.create(title="Groove", artist="Funk", price=3000)
        self.order = _pending_order(self.user, self.sheet)
        self.url = reverse("portone-verify")

    def _verify(self, order_id=None):
        body = {"paymentId": "pay-1", "orderId": str(order_id or self.order.id)}
        return self.client.post(self.url, body, format="json")

    def test_paid_completes_order(self, get_payment):
        get_payment.return_value = _portone_payment("PAID")

        res = self._verify()

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["data"]["status"], "PAID")
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PAID)
        self.assertEqual(self.order.payment_provider, "portone")
        self.assertEqual(self.order.transaction_id, "pay-1")
        self.assertTrue(Purchase.objects.filter(order=self.order).exists())

    def test_amount_mismatch(self, get_payment):
        get_payment.return_value = _portone_payment("PAID", total=100)

        res = self._verify()

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PENDING)

    def test_virtual_account_issued(self, get_payment):
        account = {"bankName": "KB", "accountNumber": "123", "accountHolder": "CopyDrum", "expiresAt": None}
        get_payment.return_value = _portone_payment("VIRTUAL_ACCOUNT_ISSUED", virtual_account=account)

        res = self._verify()

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["data"]["virtualAccountInfo"], account)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_AWAITING_DEPOSIT)
        self.assertEqual(self.order.payment_method, "virtual_account")
        self.assertEqual(self.order.virtual_account_info, account)
        self.assertFalse(Purchase.objects.exists())

    def test_unpaid_status(self, get_payment):
        get_payment.return_value = _portone_payment("FAILED")

        res = self._verify()

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"], "Payment status is FAILED")

    def test_lazy_order_creation(self, get_payment):
        get_payment.return_value = _portone_payment(
            "PAID",
            metadata={"clientOrderId": "legacy-42"},
            customer={"customerId": str(self.user.id)},
        )

        res = self._verify(order_id=uuid.uuid4())

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        created = Order.objects.get(transaction_id="pay-1")
        self.assertNotEqual(created.id, self.order.id)
        self.assertEqual(created.user, self.user)
        self.assertEqual(created.payment_status, Order.PAYMENT_PAID)
        self.assertEqual(created.metadata["original_client_order_id"], "legacy-42")

    def test_lazy_creation_without_customer_is_404(self, get_payment):
        get_payment.return_value = _portone_payment("PAID", metadata={"clientOrderId": str(uuid.uuid4())})
        res = self._verify(order_id=uuid.uuid4())
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_portone_outage_is_502(self, get_payment):
        get_payment.side_effect = PaymentProviderError("PortOne API error")
        res = self._verify()
        self.assertEqual(res.status_code, status.HTTP_502_BAD_GATEWAY)


class KakaoPayPrepareTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="buyer@example.com", password="pass")
        self.other = User.objects.create_user(email="other@example.com", password="pass")
        self.sheet = DrumSheet.objects.create(title="Groove", artist="Funk", price=3000)
        self.order = _pending_order(self.user, self.sheet)
        self.client.force_authenticate(self.user)

    def test_prepare_returns_sdk_request(self):
        res = self.client.post(
            reverse("kakaopay-prepare"),
            {"orderId": str(self.order.id), "orderName": "Groove"},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        payment_id = res.data["paymentId"]
        self.assertTrue(payment_id.startswith(f"kakaopay-{self.order.order_number}-"))
        self.assertEqual(res.data["request"]["totalAmount"], 3000)
        self.assertEqual(res.data["request"]["customer"]["email"], "buyer@example.com")

        self.order.refresh_from_db()
        self.assertEqual(self.order.transaction_id, payment_id)
        self.assertEqual(self.order.payment_method, "kakaopay")
        self.assertTrue(
            PaymentTransaction.objects.filter(order=self.order, provider="kakaopay", pg_transaction_id=payment_id).exists()
        )

    def test_foreign_order_is_404(self):
        self.client.force_authenticate(self.other)
        res = self.client.post(
            reverse("kakaopay-prepare"),
            {"orderId": str(self.order.id), "orderName": "Groove"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_paid_order_is_409(self):
        Order.objects.filter(id=self.order.id).update(payment_status=Order.PAYMENT_PAID)
        res = self.client.post(
            reverse("kakaopay-prepare"),
            {"orderId": str(self.order.id), "orderName": "Groove"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)


class PayPalApiTests(TestCase):
    """
    GUARANTEES:
    - PayPal order is created for the server-side total (USD)
    - Capture completes the store order with provider paypal
    - Capture needs a PayPal order issued for the same store order
    - Only a COMPLETED capture pays the order
    - Missing credentials -> 500 envelope
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="buyer@example.com", password="pass")
        self.sheet = DrumSheet.objects.create(title="Groove", artist="Funk", price=3000)
        self.order = _pending_order(self.user, self.sheet)
        self.client.force_authenticate(self.user)

    def _issue(self, paypal_order_id, order=None):
        order = order or self.order
        return PaymentTransaction.objects.create(
            order=order,
            user=order.user,
            provider="paypal",
            amount=3,
            currency="USD",
            pg_transaction_id=paypal_order_id,
        )

    def _capture(self, paypal_order_id="PP-1"):
        return self.client.post(
            reverse("paypal-capture-order"),
            {"orderID": paypal_order_id, "orderId": str(self.order.id)},
            format="json",
        )

    @mock.patch("payments.services.paypal.create_order")
    def test_create_order(self, create_order):
        create_order.return_value = {"id": "PP-1", "status": "CREATED"}

        res = self.client.post(
            reverse("paypal-create-order"),
            {"orderId": str(self.order.id), "locale": "en"},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["orderID"], "PP-1")
        self.assertEqual(create_order.call_args.kwargs["amount_krw"], 3000)

        log = PaymentTransaction.objects.get(order=self.order)
        self.assertEqual(log.currency, "USD")
        self.assertEqual(str(log.amount), "3.00")
        self.assertEqual(log.pg_transaction_id, "PP-1")

    @mock.patch("payments.services.paypal.capture_order")
    def test_capture_completes_order(self, capture_order):
        self._issue("PP-1")
        capture_order.return_value = {
            "id": "CAP-1",
            "status": "COMPLETED",
            "purchase_units": [{"reference_id": str(self.order.id)}],
        }

        res = self._capture()

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["captureId"], "CAP-1")
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PAID)
        self.assertEqual(self.order.payment_method, "paypal")
        self.assertEqual(self.order.transaction_id, "PP-1")

    @mock.patch("payments.services.paypal.capture_order")
    def test_capture_rejected_is_502(self, capture_order):
        self._issue("PP-1")
        capture_order.side_effect = PaymentProviderError("PayPal API error", status_code=422)

        res = self._capture()

        self.assertEqual(res.status_code, status.HTTP_502_BAD_GATEWAY)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PENDING)

    @mock.patch("payments.services.paypal.capture_order")
    def test_capture_of_paypal_order_from_another_order_is_400(self, capture_order):
        other = _pending_order(self.user, self.sheet)
        self._issue("PP-OTHER", order=other)

        res = self._capture("PP-OTHER")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        capture_order.assert_not_called()
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PENDING)

    @mock.patch("payments.services.paypal.capture_order")
    def test_capture_with_foreign_reference_is_400(self, capture_order):
        self._issue("PP-1")
        capture_order.return_value = {
            "id": "CAP-1",
            "status": "COMPLETED",
            "purchase_units": [{"reference_id": "00000000-0000-0000-0000-000000000001"}],
        }

        res = self._capture()

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PENDING)

    @mock.patch("payments.services.paypal.capture_order")
    def test_pending_capture_does_not_pay_order(self, capture_order):
        self._issue("PP-1")
        capture_order.return_value = {"id": "CAP-1", "status": "PENDING"}

        res = self._capture()

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["captureStatus"], "PENDING")
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PENDING)
        self.assertFalse(Purchase.objects.filter(order=self.order).exists())

    def test_missing_credentials_is_500(self):
        with self.settings(PAYMENTS={"PAYPAL": {}}), mock.patch.dict(
            os.environ, {"PAYPAL_CLIENT_ID": "", "PAYPAL_CLIENT_SECRET": ""}
        ):
            res = self.client.post(
                reverse("paypal-create-order"),
                {"orderId": str(self.order.id)},
                format="json",
            )

        self.assertEqual(res.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(res.data["error"], "PayPal not configured")


class DodoCreateTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="buyer@example.com", password="pass")
        self.sheet = DrumSheet.objects.create(title="Groove", artist="Funk", price=3000)
        self.order = _pending_order(self.user, self.sheet)
        self.client.force_authenticate(self.user)

    @mock.patch("payments.services.dodo.request_json")
    def test_create_payment_link(self, request_json):
        request_json.return_value = {"payment_id": "dodo-1", "payment_url": "https://pay.example/1"}

        res = self.client.post(reverse("dodo-create"), {"orderId": str(self.order.id)}, format="json")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["payment_url"], "https://pay.example/1")
        self.assertEqual(res.data["payment_id"], "dodo-1")
        body = request_json.call_args.kwargs["body"]
        self.assertEqual(body["amount"], 3000)
        self.assertEqual(body["order_name"], "Groove")
        self.assertTrue(PaymentTransaction.objects.filter(order=self.order, provider="dodo").exists())

    @mock.patch("payments.services.dodo.request_json")
    def test_missing_payment_url_is_502(self, request_json):
        request_json.return_value = {"payment_id": "dodo-1"}
        res = self.client.post(reverse("dodo-create"), {"orderId": str(self.order.id)}, format="json")
        self.assertEqual(res.status_code, status.HTTP_502_BAD_GATEWAY)

    @mock.patch("payments.services.dodo.request_json")
    def test_create_session(self, request_json):
        request_json.return_value = {"id": "cks_1", "payment_url": "https://pay.example/s"}

        res = self.client.post(reverse("dodo-create-session"), {"orderId": str(self.order.id)}, format="json")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["sessionId"], "cks_1")
        metadata = request_json.call_args.kwargs["body"]["metadata"]
        self.assertEqual(metadata["orderId"], str(self.order.id))
