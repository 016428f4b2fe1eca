# cards/models/access_log.py

"""
ASSET ACCESS LOG

Append-only record of a user being granted access to an asset.

method:
- card:     Command Card redemption (redemption is set)
- purchase: paid asset order (reference = order id)
- delivery: courier delivery completed (reference = delivery id)
"""

import uuid

from django.conf import settings
from django.db import models


class AssetAccessLog(models.Model):
    METHOD_CARD = "card"
    METHOD_PURCHASE = "purchase"
    METHOD_DELIVERY = "delivery"

    METHOD_CHOICES = [
        (METHOD_CARD, "Command Card"),
        (METHOD_PURCHASE, "Purchase"),
        (METHOD_DELIVERY, "Delivery"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="asset_access_logs",
    )
    asset = models.ForeignKey(
        "catalog.DigitalAsset",
        on_delete=models.PROTECT,
        related_name="access_logs",
    )
    method = models.CharField(max_length=20, choices=METHOD_CHOICES)

    redemption = models.OneToOneField(
        "cards.Redemption",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="access_log",
    )
    reference = models.CharField(max_length=64, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "asset"], name="cards_access_user_asset_idx"),
        ]

    def __str__(self):
        return f"{self.user_id} -> {self.asset_id} ({self.method})"
