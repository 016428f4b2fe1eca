# keybank/models/display_id.py

"""
DISPLAY ID POOL

A Display ID is a human-readable code ("GEN-482913") pre-generated by admins.
It gets bound either to a DigitalAsset (asset.display_id) or to a CommandCard
(card.display_id) and is CLAIMED when the card is redeemed.

Rules:
- code is globally unique
- claimed flips False -> True exactly once (conditional update in services)
"""

import uuid

from django.db import models


class DisplayId(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(max_length=32, unique=True)

    claimed = models.BooleanField(default=False)
    claimed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "code"]
        indexes = [
            models.Index(fields=["claimed", "created_at"], name="keybank_displayid_claimed_idx"),
        ]

    def __str__(self):
        state = "claimed" if self.claimed else "free"
        return f"{self.code} ({state})"
