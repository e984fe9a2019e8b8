# wallet/tests/test_wallet.py

from django.contrib.auth import get_user_model
from django.db import transaction
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from catalog.models import DrumSheet
from orders.models import Order, OrderItem, Purchase
from users.models import Profile
from wallet.models import CashTransaction
from wallet.services.credits import charge_credits, process_cash_purchase
from wallet.services.exceptions import InsufficientCreditError, InvalidCreditAmountError
from wallet.services.ledger import apply_credit_change

User = get_user_model()


class LedgerTests(TestCase):
    """
    GUARANTEES:
    - Every balance change writes exactly one ledger row
    - balance_after equals the new balance
    - The balance never goes negative
    """

    def setUp(self):
        self.user = User.objects.create_user(email="buyer@example.com", password="pass")

    def test_charge_then_use(self):
        with transaction.atomic():
            apply_credit_change(
                user=self.user, amount=5000, bonus_amount=500, transaction_type=CashTransaction.TYPE_CHARGE
            )
            tx = apply_credit_change(user=self.user, amount=-2000, transaction_type=CashTransaction.TYPE_USE)

        self.assertEqual(tx.balance_after, 3500)
        self.assertEqual(Profile.objects.get(user=self.user).credits, 3500)
        self.assertEqual(CashTransaction.objects.filter(user=self.user).count(), 2)

    def test_overdraw_is_rejected(self):
        with self.assertRaises(InsufficientCreditError):
            with transaction.atomic():
                apply_credit_change(user=self.user, amount=-1, transaction_type=CashTransaction.TYPE_USE)

        self.assertFalse(CashTransaction.objects.exists())

    def test_charge_credits(self):
        tx = charge_credits(user=self.user, amount="1000.4", bonus=100)

        self.assertEqual(tx.transaction_type, CashTransaction.TYPE_CHARGE)
        self.assertEqual(tx.description, "Points charge")
        self.assertEqual(tx.balance_after, 1100)

        with self.assertRaises(InvalidCreditAmountError):
            charge_credits(user=self.user, amount=0)


class WalletApiTests(TestCase):
    """
    GUARANTEES:
    - Balance + ledger are private to the caller
    - Charge creates a pending cash order; customer bonus is dropped
    - Cash purchase uses catalog prices and grants purchases
    - Insufficient balance -> 400 INSUFFICIENT_CREDIT, nothing written
    - Repeated sheets -> 400, already owned sheets -> 409, nothing charged
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="buyer@example.com", password="pass")
        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")
        Profile.objects.create(user=self.user, credits=10000)
        self.sheet = DrumSheet.objects.create(title="Groove", artist="Funk", price=3000)
        self.client.force_authenticate(self.user)

    def test_balance(self):
        res = self.client.get(reverse("wallet-balance"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data, {"success": True, "credits": 10000})

    def test_balance_without_profile_is_zero(self):
        self.client.force_authenticate(self.admin)
        res = self.client.get(reverse("wallet-balance"))
        self.assertEqual(res.data["credits"], 0)

    def test_customer_charge_ignores_bonus(self):
        res = self.client.post(
            reverse("wallet-charge"),
            {"amount": 10000, "bonusAmount": 5000, "paymentMethod": "card"},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        order = Order.objects.get(id=res.data["orderId"])
        self.assertEqual(order.metadata["type"], Order.METADATA_CASH_CHARGE)
        self.assertEqual(order.metadata["bonusAmount"], 0)
        self.assertEqual(order.order_type, Order.TYPE_CASH)

    def test_admin_charge_keeps_bonus(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(reverse("wallet-charge"), {"amount": 10000, "bonusAmount": 5000}, format="json")
        order = Order.objects.get(id=res.data["orderId"])
        self.assertEqual(order.metadata["bonusAmount"], 5000)

    def test_charge_below_minimum_is_400(self):
        res = self.client.post(reverse("wallet-charge"), {"amount": 500}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cash_purchase_uses_catalog_price(self):
        res = self.client.post(
            reverse("wallet-purchase"),
            {"items": [{"sheetId": str(self.sheet.id), "price": 1}]},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["newCredits"], 7000)

        order = Order.objects.get(id=res.data["orderId"])
        self.assertEqual(order.payment_status, Order.PAYMENT_PAID)
        self.assertEqual(order.total_amount, 3000)
        self.assertTrue(Purchase.objects.filter(user=self.user, drum_sheet=self.sheet, price_paid=3000).exists())

        tx = CashTransaction.objects.get(order=order)
        self.assertEqual(tx.transaction_type, CashTransaction.TYPE_USE)
        self.assertEqual(tx.amount, -3000)
        self.assertEqual(tx.sheet, self.sheet)

        ledger = self.client.get(reverse("wallet-transactions"))
        self.assertEqual(ledger.data["count"], 1)
        self.assertEqual(ledger.data["results"][0]["sheet_title"], "Groove")

    def test_cash_purchase_insufficient_credit(self):
        pricey = DrumSheet.objects.create(title="Epic", artist="Funk", price=20000)

        res = self.client.post(
            reverse("wallet-purchase"),
            {"items": [{"sheetId": str(pricey.id), "price": 20000}]},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            res.data, {"success": False, "reason": "INSUFFICIENT_CREDIT", "currentCredits": 10000}
        )
        self.assertFalse(Order.objects.exists())
        self.assertEqual(Profile.objects.get(user=self.user).credits, 10000)

    def test_cash_purchase_unknown_sheet(self):
        res = self.client.post(
            reverse("wallet-purchase"),
            {"items": [{"sheetId": "00000000-0000-0000-0000-000000000001", "price": 0}]},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"], "Unknown sheet(s)")

    def test_cash_purchase_repeated_sheet_is_400(self):
        item = {"sheetId": str(self.sheet.id), "price": 3000}

        res = self.client.post(reverse("wallet-purchase"), {"items": [item, item]}, format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"], "Duplicate sheet(s)")
        self.assertEqual(res.data["details"]["sheetIds"], [str(self.sheet.id)])
        self.assertFalse(Order.objects.exists())
        self.assertEqual(Profile.objects.get(user=self.user).credits, 10000)

    def test_cash_purchase_of_owned_sheet_is_409(self):
        payload = {"items": [{"sheetId": str(self.sheet.id), "price": 3000}]}
        first = self.client.post(reverse("wallet-purchase"), payload, format="json")

        res = self.client.post(reverse("wallet-purchase"), payload, format="json")

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["details"]["sheetIds"], [str(self.sheet.id)])
        self.assertEqual(Order.objects.count(), 1)
        self.assertEqual(Profile.objects.get(user=self.user).credits, 7000)

    def test_preorder_cash_purchase_sets_expected_date(self):
        preorder = DrumSheet.objects.create(
            title="Later", artist="Funk", price=2000, sales_type=DrumSheet.SALES_TYPE_PREORDER
        )

        result = process_cash_purchase(
            user=self.user,
            total_price=2000,
            description="Later",
            items=[{"sheet_id": preorder.id, "price": 2000}],
        )

        self.assertTrue(result.success)
        self.assertIsNotNone(Order.objects.get(id=result.order_id).expected_completion_date)


class PointsPaymentTests(TestCase):
    """
    GUARANTEES:
    - Points settle the caller's own pending order via shared completion
    - Balance must cover pointsToUse, which must cover the order total
    - Repeat payment on a completed order is reported, not charged
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="buyer@example.com", password="pass")
        self.other = User.objects.create_user(email="other@example.com", password="pass")
        Profile.objects.create(user=self.user, credits=5000)
        self.sheet = DrumSheet.objects.create(title="Groove", artist="Funk", price=3000)
        self.order = Order.objects.create(user=self.user, total_amount=3000)
        OrderItem.objects.create(order=self.order, drum_sheet=self.sheet, sheet_title="Groove", price=3000)
        self.client.force_authenticate(self.user)

    def _pay(self, **overrides):
        body = {"orderId": str(self.order.id), "amount": 3000, "pointsToUse": 3000}
        body.update(overrides)
        return self.client.post(reverse("points-pay"), body, format="json")

    def test_points_pay_completes_order(self):
        res = self._pay()

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["remainingPoints"], 2000)

        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PAID)
        self.assertEqual(self.order.payment_method, "points")
        self.assertEqual(self.order.metadata["pointsUsed"], 3000)
        self.assertTrue(Purchase.objects.filter(user=self.user, drum_sheet=self.sheet).exists())

    def test_second_payment_is_not_charged(self):
        self._pay()
        res = self._pay()

        self.assertEqual(res.data["message"], "Order already completed")
        self.assertEqual(res.data["remainingPoints"], 2000)
        self.assertEqual(CashTransaction.objects.filter(order=self.order).count(), 1)

    def test_insufficient_points(self):
        res = self._pay(amount=6000, pointsToUse=6000)
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"], "Insufficient points")

    def test_points_below_amount(self):
        res = self._pay(pointsToUse=2000)
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PENDING)

    def test_amount_below_order_total(self):
        res = self._pay(amount=1000, pointsToUse=1000)
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Profile.objects.get(user=self.user).credits, 5000)

    def test_zero_amount(self):
        res = self._pay(amount=0)
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"], "Missing required fields")

    def test_foreign_order_is_404(self):
        self.client.force_authenticate(self.other)
        res = self._pay()
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
