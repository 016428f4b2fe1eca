from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIClient

from cards.models import AssetAccessLog
from cards.tests.builders import make_asset, make_user
from keybank.models import EncryptionKey
from keybank.services.generation import fingerprint
from orders.models import Order
from orders.services.exceptions import (
    OrderPermissionError,
    OrderStateError,
    OrderValidationError,
)
from orders.services.orders import (
    cancel_order,
    create_asset_order,
    create_key_order,
    settle_order,
)
from orders.services.pricing import key_price


class KeyPricingTests(TestCase):
    def test_volume_tiers(self):
        cases = [
            (1, "5.00", "5.00"),
            (9, "5.00", "45.00"),
            (10, "4.50", "45.00"),
            (24, "4.50", "108.00"),
            (25, "4.00", "100.00"),
            (50, "3.50", "175.00"),
            (100, "3.00", "300.00"),
        ]
        for qty, unit, total in cases:
            quote = key_price(qty)
            self.assertEqual(quote.unit_price, Decimal(unit), qty)
            self.assertEqual(quote.total, Decimal(total), qty)

    def test_quantity_bounds(self):
        for bad in (0, -5, 1001, "abc", None):
            with self.assertRaises(OrderValidationError):
                key_price(bad)


class OrderServiceTests(TestCase):
    """
    GUARANTEES:
    - pending -> paid | failed | cancelled, and never leaves a terminal state
    - a paid asset order grants access exactly once
    - a paid key order mints keys owned by the buyer
    """

    def setUp(self):
        self.admin = make_user("admin", "admin@example.com")
        self.creator = make_user("creator", "creator@example.com")
        self.buyer = make_user("consumer", "buyer@example.com")
        self.asset = make_asset(self.creator, price="12.50")

    def test_asset_order_uses_current_price(self):
        order = create_asset_order(user=self.buyer, asset=self.asset)

        self.assertEqual(order.kind, Order.KIND_ASSET_PURCHASE)
        self.assertEqual(order.amount, Decimal("12.50"))
        self.assertEqual(order.payment_status, Order.PAYMENT_PENDING)

    def test_unpublished_asset_cannot_be_ordered(self):
        draft = make_asset(self.creator, title="Draft", published=False)
        with self.assertRaises(OrderValidationError):
            create_asset_order(user=self.buyer, asset=draft)

    def test_paid_asset_order_grants_access(self):
        order = create_asset_order(user=self.buyer, asset=self.asset)

        result = settle_order(order=order, settler=self.admin, paid=True)

        self.assertEqual(result.order.payment_status, Order.PAYMENT_PAID)
        self.assertIsNotNone(result.order.paid_at)
        self.assertEqual(result.key_pairs, [])

        log = AssetAccessLog.objects.get(user=self.buyer)
        self.assertEqual(log.asset_id, self.asset.id)
        self.assertEqual(log.method, AssetAccessLog.METHOD_PURCHASE)
        self.assertEqual(log.reference, str(order.id))

    def test_key_order_records_quantity_and_unit_price(self):
        order = create_key_order(user=self.buyer, quantity=10)

        self.assertEqual(order.kind, Order.KIND_KEY_PURCHASE)
        self.assertIsNone(order.asset_id)
        self.assertEqual(order.amount, Decimal("45.00"))
        self.assertEqual(order.metadata, {"quantity": 10, "price_per_key": "4.50"})

    def test_paid_key_order_mints_owned_keys(self):
        order = create_key_order(user=self.buyer, quantity=3)

        result = settle_order(order=order, settler=self.admin, paid=True)

        self.assertEqual(len(result.key_pairs), 3)
        keys = EncryptionKey.objects.filter(owner=self.buyer)
        self.assertEqual(keys.count(), 3)
        for pair in result.key_pairs:
            key = keys.get(public_key=pair.public_key)
            self.assertEqual(key.private_key_fingerprint, fingerprint(pair.private_key))
            self.assertEqual(key.price, Decimal("5.00"))

    def test_failed_payment_grants_nothing(self):
        order = create_asset_order(user=self.buyer, asset=self.asset)

        result = settle_order(order=order, settler=self.admin, paid=False)

        self.assertEqual(result.order.payment_status, Order.PAYMENT_FAILED)
        self.assertFalse(AssetAccessLog.objects.exists())

    def test_settle_is_admin_only_and_single_shot(self):
        order = create_asset_order(user=self.buyer, asset=self.asset)

        with self.assertRaises(OrderPermissionError):
            settle_order(order=order, settler=self.buyer, paid=True)

        settle_order(order=order, settler=self.admin, paid=True)
        with self.assertRaises(OrderStateError):
            settle_order(order=order, settler=self.admin, paid=True)

        self.assertEqual(AssetAccessLog.objects.count(), 1)

    def test_cancel_pending_order(self):
        order = create_key_order(user=self.buyer, quantity=2)

        with self.assertRaises(OrderPermissionError):
            cancel_order(order=order, user=self.creator)

        order = cancel_order(order=order, user=self.buyer)
        self.assertEqual(order.payment_status, Order.PAYMENT_CANCELLED)

        with self.assertRaises(OrderStateError):
            settle_order(order=order, settler=self.admin, paid=True)


class OrderApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin", "admin@example.com")
        self.creator = make_user("creator", "creator@example.com")
        self.buyer = make_user("consumer", "buyer@example.com")
        self.asset = make_asset(self.creator)

    def test_quote(self):
        self.client.force_authenticate(self.buyer)
        res = self.client.get("/api/orders/keys/quote/?quantity=25")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["unit_price"], "4.00")
        self.assertEqual(res.data["total"], "100.00")

        res = self.client.get("/api/orders/keys/quote/")
        self.assertEqual(res.status_code, 400)

    def test_key_order_flow_returns_private_keys_on_settle(self):
        self.client.force_authenticate(self.buyer)
        res = self.client.post("/api/orders/keys/", {"quantity": 2}, format="json")
        self.assertEqual(res.status_code, 201)
        order_id = res.data["id"]

        res = self.client.post(f"/api/orders/{order_id}/settle/", {"paid": True}, format="json")
        self.assertEqual(res.status_code, 403)

        self.client.force_authenticate(self.admin)
        res = self.client.post(f"/api/orders/{order_id}/settle/", {"paid": True}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["payment_status"], "paid")
        self.assertEqual(len(res.data["key_pairs"]), 2)

        res = self.client.post(f"/api/orders/{order_id}/settle/", {"paid": True}, format="json")
        self.assertEqual(res.status_code, 409)

    def test_orders_are_private_to_buyer(self):
        order = create_asset_order(user=self.buyer, asset=self.asset)

        self.client.force_authenticate(self.creator)
        res = self.client.get(f"/api/orders/{order.id}/")
        self.assertEqual(res.status_code, 404)
        res = self.client.post(f"/api/orders/{order.id}/cancel/")
        self.assertEqual(res.status_code, 404)

        self.client.force_authenticate(self.buyer)
        res = self.client.get("/api/orders/")
        self.assertEqual(res.data["count"], 1)

    def test_unpublished_asset_is_not_found(self):
        draft = make_asset(self.creator, title="Draft", published=False)
        self.client.force_authenticate(self.buyer)
        res = self.client.post("/api/orders/assets/", {"asset": str(draft.id)}, format="json")
        self.assertEqual(res.status_code, 404)
