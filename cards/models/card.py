# cards/models/card.py

"""
COMMAND CARD

A serial code representing one redemption right for one asset.

Lifecycle:
    issued --(retailer sells)--> active --(consumer redeems)--> redeemed
    issued | active --(admin)--> void

Each card is bound to exactly one display ID and one encryption key at
issuance; both are claimed together with the card on redemption.
"""

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q


class CommandCard(models.Model):
    STATUS_ISSUED = "issued"
    STATUS_ACTIVE = "active"
    STATUS_REDEEMED = "redeemed"
    STATUS_VOID = "void"

    STATUS_CHOICES = [
        (STATUS_ISSUED, "Issued"),
        (STATUS_ACTIVE, "Active"),
        (STATUS_REDEEMED, "Redeemed"),
        (STATUS_VOID, "Void"),
    ]

    TERMINAL_STATUSES = (STATUS_REDEEMED, STATUS_VOID)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    serial_code = models.CharField(max_length=19, unique=True)

    asset = models.ForeignKey(
        "catalog.DigitalAsset",
        on_delete=models.PROTECT,
        related_name="cards",
    )
    assignment = models.ForeignKey(
        "distribution.DistributionAssignment",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="cards",
    )
    retailer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="retailer_cards",
    )

    display_id = models.OneToOneField(
        "keybank.DisplayId",
        on_delete=models.PROTECT,
        related_name="card",
    )
    encryption_key = models.OneToOneField(
        "keybank.EncryptionKey",
        on_delete=models.PROTECT,
        related_name="card",
    )

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ISSUED)

    activated_at = models.DateTimeField(null=True, blank=True)
    redeemed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="redeemed_cards",
    )
    redeemed_at = models.DateTimeField(null=True, blank=True)
    voided_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["retailer", "status"], name="cards_card_retailer_idx"),
            models.Index(fields=["assignment", "status"], name="cards_card_assignment_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(status="redeemed") | Q(redeemed_by__isnull=False, redeemed_at__isnull=False),
                name="chk_card_redeemed_has_redeemer",
            ),
        ]

    def __str__(self):
        return f"{self.serial_code} ({self.status})"
