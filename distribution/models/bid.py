# distribution/models/bid.py

"""
DISTRIBUTION BID

A creator's offer to have N Command Cards of one asset distributed by retailers.

Lifecycle:
    pending --(admin approve)--> open --(fully reserved)--> accepted --(all done)--> fulfilled
    pending --(admin reject)---> cancelled
    open    --(creator/admin, nothing reserved)--> cancelled

quantity_reserved is only ever moved by the allocator's guarded updates.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q


class DistributionBid(models.Model):
    STATUS_PENDING = "pending"
    STATUS_OPEN = "open"
    STATUS_ACCEPTED = "accepted"
    STATUS_FULFILLED = "fulfilled"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending review"),
        (STATUS_OPEN, "Open"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_FULFILLED, "Fulfilled"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    TYPE_PROFIT_SHARE = "profit_share"
    TYPE_FLAT_FEE = "flat_fee"

    TYPE_CHOICES = [
        (TYPE_PROFIT_SHARE, "Profit share"),
        (TYPE_FLAT_FEE, "Flat fee"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="distribution_bids",
    )
    asset = models.ForeignKey(
        "catalog.DigitalAsset",
        on_delete=models.PROTECT,
        related_name="bids",
    )

    quantity = models.PositiveIntegerField()
    quantity_reserved = models.PositiveIntegerField(default=0)

    region = models.CharField(max_length=100, blank=True)

    bid_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    profit_percent = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    flat_fee = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="distribution_bid_status_idx"),
            models.Index(fields=["creator", "created_at"], name="distribution_bid_creator_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_bid_quantity_gt_zero",
            ),
            models.CheckConstraint(
                condition=Q(quantity_reserved__lte=F("quantity")),
                name="chk_bid_reserved_lte_quantity",
            ),
            models.CheckConstraint(
                condition=Q(profit_percent__isnull=True) | (Q(profit_percent__gt=0) & Q(profit_percent__lte=100)),
                name="chk_bid_profit_percent_range",
            ),
            models.CheckConstraint(
                condition=Q(flat_fee__isnull=True) | Q(flat_fee__gte=0),
                name="chk_bid_flat_fee_gte_zero",
            ),
        ]

    @property
    def quantity_remaining(self) -> int:
        return max(0, int(self.quantity) - int(self.quantity_reserved))

    def clean(self):
        if self.bid_type == self.TYPE_PROFIT_SHARE:
            if self.profit_percent is None:
                raise ValidationError({"profit_percent": "profit_percent is required for profit-share bids"})
            if not (Decimal("0") < self.profit_percent <= Decimal("100")):
                raise ValidationError({"profit_percent": "profit_percent must be in (0, 100]"})
        elif self.bid_type == self.TYPE_FLAT_FEE:
            if self.flat_fee is None:
                raise ValidationError({"flat_fee": "flat_fee is required for flat-fee bids"})
            if self.flat_fee < Decimal("0"):
                raise ValidationError({"flat_fee": "flat_fee cannot be negative"})

    def __str__(self):
        return f"Bid {self.id} ({self.status}) {self.quantity_reserved}/{self.quantity}"
