# cards/models/redemption.py

"""
REDEMPTION

One row per redeemed card. The OneToOne on card is the database-level
guarantee that a card is consumed at most once.
"""

import uuid

from django.conf import settings
from django.db import models


class Redemption(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    card = models.OneToOneField(
        "cards.CommandCard",
        on_delete=models.PROTECT,
        related_name="redemption",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="redemptions",
    )
    asset = models.ForeignKey(
        "catalog.DigitalAsset",
        on_delete=models.PROTECT,
        related_name="redemptions",
    )
    display_id = models.ForeignKey(
        "keybank.DisplayId",
        on_delete=models.PROTECT,
        related_name="redemptions",
    )
    encryption_key = models.ForeignKey(
        "keybank.EncryptionKey",
        on_delete=models.PROTECT,
        related_name="redemptions",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="cards_redemption_user_idx"),
            models.Index(fields=["asset", "created_at"], name="cards_redemption_asset_idx"),
        ]

    def __str__(self):
        return f"Redemption {self.card_id} by {self.user_id}"
