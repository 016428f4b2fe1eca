# orders/models/order.py

"""
ORDER

Money-in for the marketplace:
- asset_purchase: direct purchase of a published asset (amount = asset price)
- key_purchase:   a batch of encryption keys at tiered pricing

payment_status:
    pending -> paid | failed   (settlement)
    pending -> cancelled       (owner)

Payment capture itself happens outside this service; settlement records the outcome.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q


class Order(models.Model):
    KIND_ASSET_PURCHASE = "asset_purchase"
    KIND_KEY_PURCHASE = "key_purchase"

    KIND_CHOICES = [
        (KIND_ASSET_PURCHASE, "Asset purchase"),
        (KIND_KEY_PURCHASE, "Key purchase"),
    ]

    PAYMENT_PENDING = "pending"
    PAYMENT_PAID = "paid"
    PAYMENT_FAILED = "failed"
    PAYMENT_CANCELLED = "cancelled"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PAID, "Paid"),
        (PAYMENT_FAILED, "Failed"),
        (PAYMENT_CANCELLED, "Cancelled"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    asset = models.ForeignKey(
        "catalog.DigitalAsset",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
    )

    kind = models.CharField(max_length=20, choices=KIND_CHOICES)

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    currency = models.CharField(max_length=3, default="usd")

    payment_status = models.CharField(
        max_length=20,
        choices=PAYMENT_STATUS_CHOICES,
        default=PAYMENT_PENDING,
    )

    # key_purchase: {"quantity": int, "price_per_key": "3.50"}
    metadata = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="orders_order_user_idx"),
            models.Index(fields=["payment_status", "created_at"], name="orders_order_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gte=0),
                name="chk_order_amount_gte_zero",
            ),
            models.CheckConstraint(
                condition=~Q(kind="asset_purchase") | Q(asset__isnull=False),
                name="chk_order_asset_purchase_has_asset",
            ),
        ]

    def __str__(self):
        return f"Order {self.id} {self.kind} {self.amount} {self.currency} ({self.payment_status})"
