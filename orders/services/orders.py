# orders/services/orders.py

"""
ORDER SERVICES

- create_asset_order: buyer orders a published asset at its current price
- create_key_order:   buyer orders N keys at tiered pricing
- settle_order:       admin records the payment outcome (pending -> paid | failed)
                      paid asset order -> AssetAccessLog(method=purchase)
                      paid key order   -> N key pairs owned by the buyer
- cancel_order:       buyer cancels their own pending order
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.db import transaction
from django.utils import timezone

from cards.models import AssetAccessLog
from catalog.models import DigitalAsset
from keybank.services.generation import GeneratedKeyPair, generate_key_pairs
from orders.models import Order
from orders.services.exceptions import (
    OrderPermissionError,
    OrderStateError,
    OrderValidationError,
)
from orders.services.pricing import key_price
from permissions.roles import is_admin

logger = logging.getLogger(__name__)


@dataclass
class SettlementResult:
    order: Order
    key_pairs: list[GeneratedKeyPair] = field(default_factory=list)


@transaction.atomic
def create_asset_order(*, user, asset: DigitalAsset) -> Order:
    asset = DigitalAsset.objects.get(pk=asset.pk)
    if not asset.published:
        raise OrderValidationError("Asset is not available for purchase")

    order = Order.objects.create(
        user=user,
        asset=asset,
        kind=Order.KIND_ASSET_PURCHASE,
        amount=asset.price,
        metadata={"asset_title": asset.title},
    )

    logger.info(
        "Asset order created",
        extra={"order_id": str(order.id), "asset_id": str(asset.id), "amount": str(order.amount)},
    )
    return order


@transaction.atomic
def create_key_order(*, user, quantity) -> Order:
    quote = key_price(quantity)

    order = Order.objects.create(
        user=user,
        kind=Order.KIND_KEY_PURCHASE,
        amount=quote.total,
        metadata={
            "quantity": quote.quantity,
            "price_per_key": str(quote.unit_price),
        },
    )

    logger.info(
        "Key order created",
        extra={"order_id": str(order.id), "quantity": quote.quantity, "amount": str(quote.total)},
    )
    return order


@transaction.atomic
def settle_order(*, order: Order, settler, paid: bool) -> SettlementResult:
    if not is_admin(settler):
        raise OrderPermissionError("Only admins can settle orders")

    order = Order.objects.select_for_update().get(pk=order.pk)
    if order.payment_status != Order.PAYMENT_PENDING:
        raise OrderStateError(f"Order is not pending (payment_status={order.payment_status})")

    result = SettlementResult(order=order)

    if not paid:
        order.payment_status = Order.PAYMENT_FAILED
        order.save(update_fields=["payment_status", "updated_at"])
        logger.info("Order payment failed", extra={"order_id": str(order.id)})
        return result

    order.payment_status = Order.PAYMENT_PAID
    order.paid_at = timezone.now()
    order.save(update_fields=["payment_status", "paid_at", "updated_at"])

    if order.kind == Order.KIND_ASSET_PURCHASE:
        AssetAccessLog.objects.create(
            user_id=order.user_id,
            asset_id=order.asset_id,
            method=AssetAccessLog.METHOD_PURCHASE,
            reference=str(order.id),
        )
    elif order.kind == Order.KIND_KEY_PURCHASE:
        metadata = order.metadata or {}
        result.key_pairs = generate_key_pairs(
            quantity=metadata.get("quantity"),
            base_price=metadata.get("price_per_key"),
            owner=order.user,
        )

    logger.info(
        "Order paid",
        extra={"order_id": str(order.id), "kind": order.kind, "keys": len(result.key_pairs)},
    )
    return result


@transaction.atomic
def cancel_order(*, order: Order, user) -> Order:
    order = Order.objects.select_for_update().get(pk=order.pk)

    if order.user_id != getattr(user, "id", None) and not is_admin(user):
        raise OrderPermissionError("Only the buyer can cancel this order")
    if order.payment_status != Order.PAYMENT_PENDING:
        raise OrderStateError(f"Only pending orders can be cancelled (payment_status={order.payment_status})")

    order.payment_status = Order.PAYMENT_CANCELLED
    order.save(update_fields=["payment_status", "updated_at"])

    logger.info("Order cancelled", extra={"order_id": str(order.id)})
    return order
