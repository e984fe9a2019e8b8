# cart/tests/test_cart.py

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from cart.models import CartItem
from catalog.models import Collection, DrumSheet
from orders.models import Order, Purchase

User = get_user_model()


class CartApiTests(TestCase):
    """
    GUARANTEES:
    - Price snapshot comes from the sheet, not the client
    - Adding twice keeps one line
    - Owned sheets cannot be added (409)
    - Collections add their unowned sheets at the bundle share
    - Items can be removed one by one or cleared
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="buyer@example.com", password="pass")
        self.client.force_authenticate(self.user)
        self.one = DrumSheet.objects.create(title="One", artist="Alpha", price=3000)
        self.two = DrumSheet.objects.create(title="Two", artist="Beta", price=3000)

    def _own(self, sheet):
        order = Order.objects.create(
            user=self.user,
            total_amount=sheet.price,
            status=Order.STATUS_COMPLETED,
            payment_status=Order.PAYMENT_PAID,
        )
        Purchase.objects.create(user=self.user, drum_sheet=sheet, order=order, price_paid=sheet.price)

    def test_add_sheet_snapshots_price(self):
        res = self.client.post(
            reverse("cart-add-item"),
            {"sheet_id": str(self.one.id), "price": 1},
            format="json",
        )
        self.client.post(reverse("cart-add-item"), {"sheet_id": str(self.one.id)}, format="json")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["item_count"], 1)
        self.assertEqual(res.data["total_amount"], 3000)
        self.assertEqual(CartItem.objects.filter(cart__user=self.user).count(), 1)

    def test_owned_sheet_is_409(self):
        self._own(self.one)

        res = self.client.post(reverse("cart-add-item"), {"sheet_id": str(self.one.id)}, format="json")

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(res.data["success"])

    def test_inactive_sheet_is_404(self):
        self.one.is_active = False
        self.one.save()
        res = self.client.post(reverse("cart-add-item"), {"sheet_id": str(self.one.id)}, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_add_collection_uses_bundle_share(self):
        third = DrumSheet.objects.create(title="Three", artist="Gamma", price=3000)
        collection = Collection.objects.create(title="Pack", original_price=9000, sale_price=6001)
        collection.sheets.add(self.one, self.two, third)
        self._own(self.two)

        res = self.client.post(
            reverse("cart-add-collection"),
            {"collection_id": str(collection.id)},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        prices = dict(
            CartItem.objects.filter(cart__user=self.user).values_list("drum_sheet_id", "price")
        )
        self.assertEqual(prices, {self.one.id: 2000, third.id: 2001})
        self.assertTrue(
            all(item["collection_id"] == str(collection.id) for item in res.data["items"])
        )

    def test_remove_and_clear(self):
        self.client.post(reverse("cart-add-item"), {"sheet_id": str(self.one.id)}, format="json")
        res = self.client.post(reverse("cart-add-item"), {"sheet_id": str(self.two.id)}, format="json")
        first_id = res.data["items"][0]["id"]

        removed = self.client.delete(reverse("cart-remove-item", kwargs={"item_id": first_id}))
        missing = self.client.delete(reverse("cart-remove-item", kwargs={"item_id": first_id}))
        cleared = self.client.delete(reverse("cart-clear"))

        self.assertEqual(removed.data["item_count"], 1)
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(cleared.data["item_count"], 0)

    def test_cart_requires_auth(self):
        self.client.force_authenticate(None)
        res = self.client.get(reverse("cart-active"))
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)


class CheckoutTests(TestCase):
    """
    GUARANTEES:
    - Summary currency + payment methods follow the storefront locale
    - Sheets bought meanwhile are flagged and left out of the total
    - Checkout creates one pending order for the unowned lines
    - Empty cart -> 400
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="buyer@example.com", password="pass")
        self.client.force_authenticate(self.user)
        self.one = DrumSheet.objects.create(title="One", artist="Alpha", price=3000)
        self.two = DrumSheet.objects.create(title="Two", artist="Beta", price=5000)
        for sheet in (self.one, self.two):
            self.client.post(reverse("cart-add-item"), {"sheet_id": str(sheet.id)}, format="json")

    def test_korean_summary(self):
        res = self.client.get(reverse("cart-summary"), {"locale": "ko"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["currency"], "KRW")
        self.assertEqual(res.data["total_krw"], 8000)
        self.assertEqual(res.data["formatted_total"], "8,000원")
        self.assertEqual(res.data["payment_methods"], ["card", "kakaopay", "virtual_account", "points"])

    def test_global_summary(self):
        res = self.client.get(reverse("cart-summary"), {"locale": "en"})

        self.assertEqual(res.data["currency"], "USD")
        self.assertEqual(res.data["total"], "8.00")
        self.assertEqual(res.data["formatted_total"], "$8.00")
        self.assertEqual(res.data["payment_methods"], ["paypal", "dodo", "points"])

    def test_summary_flags_owned_sheets(self):
        order = Order.objects.create(
            user=self.user, total_amount=3000, status=Order.STATUS_COMPLETED, payment_status=Order.PAYMENT_PAID
        )
        Purchase.objects.create(user=self.user, drum_sheet=self.one, order=order, price_paid=3000)

        res = self.client.get(reverse("cart-summary"))

        flags = {item["sheet_id"]: item["already_purchased"] for item in res.data["items"]}
        self.assertTrue(flags[str(self.one.id)])
        self.assertFalse(flags[str(self.two.id)])
        self.assertEqual(res.data["total_krw"], 5000)

    def test_checkout_creates_pending_order(self):
        res = self.client.post(reverse("cart-checkout"), {}, format="json")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["amount"], 8000)
        order = Order.objects.get(id=res.data["orderId"])
        self.assertEqual(order.payment_status, Order.PAYMENT_PENDING)
        self.assertTrue(order.metadata["description"].endswith(" +1"))
        self.assertEqual(order.items.count(), 2)

    def test_checkout_empty_cart_is_400(self):
        self.client.delete(reverse("cart-clear"))
        res = self.client.post(reverse("cart-checkout"), {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"], "Cart is empty")
