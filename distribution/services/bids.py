# distribution/services/bids.py

"""
BID SERVICES

- create_bid:  asset creator offers a published asset for distribution
- review_bid:  admin approves (open) or rejects (cancelled) a pending bid
- cancel_bid:  creator/admin withdraws a bid nothing has been reserved on
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import transaction

from catalog.models import DigitalAsset
from distribution.models import DistributionBid
from distribution.services.exceptions import (
    BidPermissionError,
    BidStateError,
    BidValidationError,
)
from permissions.roles import is_admin

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(value, *, field: str) -> Decimal:
    try:
        return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise BidValidationError(f"{field} must be a valid decimal") from exc


def _validate_terms(*, bid_type: str, profit_percent, flat_fee) -> tuple[Decimal | None, Decimal | None]:
    if bid_type == DistributionBid.TYPE_PROFIT_SHARE:
        if profit_percent in (None, ""):
            raise BidValidationError("profit_percent is required for profit-share bids")
        pct = _money(profit_percent, field="profit_percent")
        if pct <= Decimal("0") or pct > Decimal("100"):
            raise BidValidationError("profit_percent must be greater than 0 and at most 100")
        return pct, None

    if bid_type == DistributionBid.TYPE_FLAT_FEE:
        if flat_fee in (None, ""):
            raise BidValidationError("flat_fee is required for flat-fee bids")
        fee = _money(flat_fee, field="flat_fee")
        if fee < Decimal("0"):
            raise BidValidationError("flat_fee cannot be negative")
        return None, fee

    raise BidValidationError("bid_type must be profit_share or flat_fee")


@transaction.atomic
def create_bid(
    *,
    creator,
    asset: DigitalAsset,
    quantity,
    bid_type: str,
    region: str = "",
    profit_percent=None,
    flat_fee=None,
) -> DistributionBid:
    asset = DigitalAsset.objects.select_for_update().get(pk=asset.pk)

    if asset.creator_id != getattr(creator, "id", None):
        raise BidPermissionError("Only the asset's creator can create a distribution bid")
    if not asset.published:
        raise BidValidationError("Asset must be published before it can be distributed")

    if isinstance(quantity, bool):
        raise BidValidationError("quantity must be a whole number")
    try:
        qty = int(quantity)
    except (TypeError, ValueError) as exc:
        raise BidValidationError("quantity must be a whole number") from exc
    if qty <= 0:
        raise BidValidationError("quantity must be greater than zero")

    pct, fee = _validate_terms(bid_type=bid_type, profit_percent=profit_percent, flat_fee=flat_fee)

    bid = DistributionBid.objects.create(
        creator=creator,
        asset=asset,
        quantity=qty,
        region=(region or "").strip(),
        bid_type=bid_type,
        profit_percent=pct,
        flat_fee=fee,
        status=DistributionBid.STATUS_PENDING,
    )

    logger.info(
        "Distribution bid created",
        extra={
            "bid_id": str(bid.id),
            "asset_id": str(asset.id),
            "quantity": qty,
            "bid_type": bid_type,
        },
    )
    return bid


@transaction.atomic
def review_bid(*, bid: DistributionBid, reviewer, approve: bool) -> DistributionBid:
    if not is_admin(reviewer):
        raise BidPermissionError("Only admins can review bids")

    bid = DistributionBid.objects.select_for_update().get(pk=bid.pk)
    if bid.status != DistributionBid.STATUS_PENDING:
        raise BidStateError(f"Only pending bids can be reviewed (status={bid.status})")

    bid.status = DistributionBid.STATUS_OPEN if approve else DistributionBid.STATUS_CANCELLED
    bid.save(update_fields=["status", "updated_at"])

    logger.info(
        "Distribution bid reviewed",
        extra={"bid_id": str(bid.id), "approved": bool(approve), "reviewer_id": str(reviewer.id)},
    )
    return bid


@transaction.atomic
def cancel_bid(*, bid: DistributionBid, user) -> DistributionBid:
    bid = DistributionBid.objects.select_for_update().get(pk=bid.pk)

    if bid.creator_id != getattr(user, "id", None) and not is_admin(user):
        raise BidPermissionError("Only the bid's creator or an admin can cancel it")
    if bid.status not in (DistributionBid.STATUS_PENDING, DistributionBid.STATUS_OPEN):
        raise BidStateError(f"Bid cannot be cancelled (status={bid.status})")
    if bid.quantity_reserved > 0:
        raise BidStateError("Bid has reserved quantity; cancel its assignments first")

    bid.status = DistributionBid.STATUS_CANCELLED
    bid.save(update_fields=["status", "updated_at"])

    logger.info("Distribution bid cancelled", extra={"bid_id": str(bid.id)})
    return bid
