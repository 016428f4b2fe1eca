# earnings/services/calculators.py

"""
EARNINGS CALCULATORS

Read-only; every figure is derived from source rows, nothing is cached.

creator:   redemptions of the creator's assets x REDEMPTION_PAYOUT
retailer:  profit_share -> sum(asset price x profit_percent / 100) per redeemed card
           flat_fee     -> flat_fee x assignment.quantity / bid.quantity per completed assignment
referrals: referral count x REFERRAL_REWARD
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db.models import Sum
from django.utils import timezone

from cards.models import CommandCard, Redemption
from distribution.models import DistributionAssignment, DistributionBid
from earnings.models import Referral, WithdrawalRequest

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize_money(x) -> Decimal:
    return Decimal(str(x or 0)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _setting(name: str) -> Decimal:
    return Decimal(str(settings.MARKETPLACE[name]))


@dataclass(frozen=True)
class CreatorEarnings:
    redemptions: int
    redemptions_this_month: int
    total: Decimal
    this_month: Decimal


@dataclass(frozen=True)
class RetailerEarnings:
    profit_share: Decimal
    flat_fee: Decimal
    total: Decimal


@dataclass(frozen=True)
class ReferralEarnings:
    count: int
    total: Decimal


def month_start(now=None):
    local = timezone.localtime(now or timezone.now())
    return local.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def creator_earnings(user, now=None) -> CreatorEarnings:
    payout = _setting("REDEMPTION_PAYOUT")
    qs = Redemption.objects.filter(asset__creator=user)

    total_count = qs.count()
    month_count = qs.filter(created_at__gte=month_start(now)).count()

    return CreatorEarnings(
        redemptions=total_count,
        redemptions_this_month=month_count,
        total=quantize_money(payout * total_count),
        this_month=quantize_money(payout * month_count),
    )


def retailer_earnings(user) -> RetailerEarnings:
    profit_share = ZERO
    redeemed = CommandCard.objects.filter(
        retailer=user,
        status=CommandCard.STATUS_REDEEMED,
        assignment__bid__bid_type=DistributionBid.TYPE_PROFIT_SHARE,
    ).values_list("asset__price", "assignment__bid__profit_percent")
    for price, pct in redeemed:
        profit_share += Decimal(str(price or 0)) * Decimal(str(pct or 0)) / Decimal("100")

    flat_fee = ZERO
    completed = DistributionAssignment.objects.filter(
        retailer=user,
        status=DistributionAssignment.STATUS_COMPLETED,
        bid__bid_type=DistributionBid.TYPE_FLAT_FEE,
    ).values_list("quantity", "bid__quantity", "bid__flat_fee")
    for qty, bid_qty, fee in completed:
        if bid_qty:
            flat_fee += Decimal(str(fee or 0)) * Decimal(qty) / Decimal(bid_qty)

    profit_share = quantize_money(profit_share)
    flat_fee = quantize_money(flat_fee)
    return RetailerEarnings(profit_share=profit_share, flat_fee=flat_fee, total=profit_share + flat_fee)


def referral_earnings(user) -> ReferralEarnings:
    count = Referral.objects.filter(referrer=user).count()
    return ReferralEarnings(count=count, total=quantize_money(_setting("REFERRAL_REWARD") * count))


def total_earnings(user) -> Decimal:
    return (
        creator_earnings(user).total
        + retailer_earnings(user).total
        + referral_earnings(user).total
    )


def reserved_withdrawals(user) -> Decimal:
    agg = WithdrawalRequest.objects.filter(
        user=user,
        status__in=WithdrawalRequest.RESERVING_STATUSES,
    ).aggregate(total=Sum("amount_requested"))
    return quantize_money(agg["total"])


def available_balance(user) -> Decimal:
    return max(ZERO, quantize_money(total_earnings(user) - reserved_withdrawals(user)))
