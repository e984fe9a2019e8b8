# orders/tests/test_order_api.py

from datetime import date

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from catalog.models import DrumSheet
from orders.models import Order, OrderItem, Purchase

User = get_user_model()


def _order(user, *sheets, paid=False):
    order = Order.objects.create(
        user=user,
        total_amount=sum(s.price for s in sheets),
        status=Order.STATUS_COMPLETED if paid else Order.STATUS_PENDING,
        payment_status=Order.PAYMENT_PAID if paid else Order.PAYMENT_PENDING,
    )
    for sheet in sheets:
        OrderItem.objects.create(order=order, drum_sheet=sheet, sheet_title=sheet.title, price=sheet.price)
    return order


class CustomerOrderApiTests(TestCase):
    """
    GUARANTEES:
    - Create returns orderId + orderNumber for a pending order
    - Bad input -> 400 envelope
    - Orders are private to their owner
    - Payment notes append history and flatten the latest one
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="buyer@example.com", password="pass")
        self.other = User.objects.create_user(email="other@example.com", password="pass")
        self.sheet = DrumSheet.objects.create(title="Groove", artist="Funk", price=3000)
        self.client.force_authenticate(self.user)

    def test_create_order(self):
        res = self.client.post(
            reverse("order-create"),
            {"items": [{"sheetId": str(self.sheet.id), "price": 3000}], "amount": 3000},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["success"])
        order = Order.objects.get(id=res.data["orderId"])
        self.assertEqual(order.user, self.user)
        self.assertEqual(order.order_number, res.data["orderNumber"])
        self.assertEqual(order.items.get().sheet_title, "Groove")

    def test_create_order_missing_items(self):
        res = self.client.post(reverse("order-create"), {"amount": 3000}, format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(res.data["success"])
        self.assertEqual(res.data["error"], "Missing required parameters")

    def test_create_order_requires_auth(self):
        self.client.force_authenticate(None)
        res = self.client.post(reverse("order-create"), {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_history_lists_only_own_orders(self):
        mine = _order(self.user, self.sheet)
        _order(self.other, self.sheet)

        res = self.client.get(reverse("order-history"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["id"], str(mine.id))

    def test_detail_of_foreign_order_is_404(self):
        foreign = _order(self.other, self.sheet)
        res = self.client.get(reverse("order-detail", kwargs={"order_id": foreign.id}))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_note(self):
        order = _order(self.user, self.sheet)

        res = self.client.post(
            reverse("order-update-note"),
            {"orderId": str(order.id), "note": "User closed window", "noteType": "cancel"},
            format="json",
        )
        self.client.post(reverse("order-update-note"), {"orderId": str(order.id)}, format="json")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        notes = order.metadata["payment_notes"]
        self.assertEqual([n["type"] for n in notes], ["cancel", "unknown"])
        self.assertTrue(order.payment_note.startswith("[unknown] No reason given ("))

    def test_update_note_on_foreign_order_is_404(self):
        foreign = _order(self.other, self.sheet)
        res = self.client.post(
            reverse("order-update-note"),
            {"orderId": str(foreign.id), "note": "x"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)


class PurchaseDownloadTests(TestCase):
    """
    GUARANTEES:
    - Owned sheet with a file -> 200 + url
    - Not purchased -> 403 (free sheets exempt)
    - Purchase tied to a refunded order -> 403
    - Preorder still being transcribed -> 409 with expected date
    - Owned sheet without a file -> 404
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="buyer@example.com", password="pass")
        self.client.force_authenticate(self.user)

    def _url(self, sheet):
        return reverse("purchase-download", kwargs={"sheet_id": sheet.id})

    def _own(self, sheet, **order_fields):
        order = _order(self.user, sheet, paid=True)
        for key, value in order_fields.items():
            setattr(order, key, value)
        order.save()
        return Purchase.objects.create(user=self.user, drum_sheet=sheet, order=order, price_paid=sheet.price)

    def test_owned_sheet_returns_url(self):
        sheet = DrumSheet.objects.create(
            title="Groove", artist="Funk", price=3000, pdf_url="https://cdn.example.com/g.pdf"
        )
        self._own(sheet)

        res = self.client.get(self._url(sheet))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["url"], "https://cdn.example.com/g.pdf")
        self.assertEqual(res.data["artist"], "Funk")

    def test_not_purchased_is_403(self):
        sheet = DrumSheet.objects.create(
            title="Groove", artist="Funk", price=3000, pdf_url="https://cdn.example.com/g.pdf"
        )
        res = self.client.get(self._url(sheet))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_refunded_order_no_longer_grants_download(self):
        sheet = DrumSheet.objects.create(
            title="Groove", artist="Funk", price=3000, pdf_url="https://cdn.example.com/g.pdf"
        )
        self._own(sheet, payment_status=Order.PAYMENT_REFUNDED, status=Order.STATUS_REFUNDED)

        res = self.client.get(self._url(sheet))

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_free_sheet_needs_no_purchase(self):
        sheet = DrumSheet.objects.create(
            title="Free", artist="Funk", price=0, pdf_url="https://cdn.example.com/f.pdf"
        )
        res = self.client.get(self._url(sheet))
        self.assertEqual(res.status_code, status.HTTP_200_OK)

    def test_preorder_without_file_is_409(self):
        sheet = DrumSheet.objects.create(
            title="Later", artist="Funk", price=5000, sales_type=DrumSheet.SALES_TYPE_PREORDER
        )
        self._own(sheet, expected_completion_date=date(2024, 6, 10))

        res = self.client.get(self._url(sheet))

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["expected_completion_date"], "2024-06-10")
        self.assertEqual(res.data["expected_completion_date_display"], "2024. 6. 10")

    def test_owned_sheet_without_file_is_404(self):
        sheet = DrumSheet.objects.create(title="Groove", artist="Funk", price=3000)
        self._own(sheet)
        res = self.client.get(self._url(sheet))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_purchase_list(self):
        sheet = DrumSheet.objects.create(title="Groove", artist="Funk", price=3000)
        self._own(sheet)

        res = self.client.get(reverse("purchase-list"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["sheet_id"], str(sheet.id))


class AdminOrderApiTests(TestCase):
    """
    GUARANTEES:
    - Admin completion goes through the shared completion routine
    - Completing twice is reported, not repeated
    - Expected date: single set validates YYYY-MM-DD
    - Bulk set touches preorder orders only
    - Customers are refused
    """

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")
        self.customer = User.objects.create_user(email="buyer@example.com", password="pass")
        self.instant = DrumSheet.objects.create(title="Groove", artist="Funk", price=3000)
        self.preorder = DrumSheet.objects.create(
            title="Later", artist="Funk", price=5000, sales_type=DrumSheet.SALES_TYPE_PREORDER
        )
        self.client.force_authenticate(self.admin)

    def test_complete_order(self):
        order = _order(self.customer, self.instant)

        res = self.client.post(
            reverse("order-complete"),
            {"orderId": str(order.id), "paymentMethod": "bank_transfer", "depositorName": "Kim"},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["message"], "Order completed")
        order.refresh_from_db()
        self.assertEqual(order.payment_status, Order.PAYMENT_PAID)
        self.assertEqual(order.depositor_name, "Kim")
        self.assertEqual(order.payment_provider, "manual")
        self.assertTrue(Purchase.objects.filter(user=self.customer, drum_sheet=self.instant).exists())

        again = self.client.post(
            reverse("order-complete"),
            {"orderId": str(order.id), "paymentMethod": "bank_transfer"},
            format="json",
        )
        self.assertEqual(again.data["message"], "Order already completed")

    def test_complete_unknown_order_is_404(self):
        res = self.client.post(
            reverse("order-complete"),
            {"orderId": "00000000-0000-0000-0000-000000000001", "paymentMethod": "card"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_customer_cannot_complete(self):
        self.client.force_authenticate(self.customer)
        order = _order(self.customer, self.instant)

        res = self.client.post(
            reverse("order-complete"),
            {"orderId": str(order.id), "paymentMethod": "card"},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        order.refresh_from_db()
        self.assertEqual(order.payment_status, Order.PAYMENT_PENDING)

    def test_set_expected_date(self):
        order = _order(self.customer, self.preorder, paid=True)
        url = reverse("order-expected-date", kwargs={"order_id": order.id})

        res = self.client.put(url, {"expected_completion_date": "2024-07-01"}, format="json")
        bad = self.client.put(url, {"expected_completion_date": "07/01/2024"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["expected_completion_date"], "2024-07-01")
        self.assertEqual(bad.status_code, status.HTTP_400_BAD_REQUEST)
        order.refresh_from_db()
        self.assertEqual(order.expected_completion_date, date(2024, 7, 1))

    def test_bulk_expected_date_skips_instant_orders(self):
        pre = _order(self.customer, self.preorder, paid=True)
        inst = _order(self.customer, self.instant, paid=True)

        res = self.client.put(
            reverse("order-bulk-expected-date"),
            {"orderIds": [str(pre.id), str(inst.id)], "expected_completion_date": "2024-07-01"},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["updatedCount"], 1)
        self.assertEqual(res.data["skippedCount"], 1)
        self.assertEqual(res.data["updatedOrderIds"], [str(pre.id)])
        self.assertEqual(res.data["skippedOrderIds"], [str(inst.id)])
        inst.refresh_from_db()
        self.assertIsNone(inst.expected_completion_date)

    def test_bulk_expected_date_without_preorders_is_400(self):
        inst = _order(self.customer, self.instant, paid=True)
        res = self.client.put(
            reverse("order-bulk-expected-date"),
            {"orderIds": [str(inst.id)], "expected_completion_date": "2024-07-01"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bulk_expected_date_unknown_orders_is_404(self):
        res = self.client.put(
            reverse("order-bulk-expected-date"),
            {"orderIds": ["00000000-0000-0000-0000-000000000001"], "expected_completion_date": "2024-07-01"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
