# keybank/models/encryption_key.py

"""
ENCRYPTION KEY (public half of a generated key pair)

- public_key is what consumers type in when redeeming a Command Card.
- The private key is handed out once at generation time and never stored;
  only its sha256 fingerprint is kept for support lookups.
- claimed/assigned_to are set by redemption (conditional update).
- owner is the purchaser when keys were bought through a key order.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q


class EncryptionKey(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    public_key = models.CharField(max_length=64, unique=True)
    private_key_fingerprint = models.CharField(max_length=64)

    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    downloads_remaining = models.PositiveIntegerField(default=0)

    claimed = models.BooleanField(default=False)
    claimed_at = models.DateTimeField(null=True, blank=True)

    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="assigned_keys",
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="owned_keys",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["claimed", "created_at"], name="keybank_key_claimed_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(price__gte=0),
                name="chk_encryptionkey_price_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(claimed=False) | Q(assigned_to__isnull=False),
                name="chk_encryptionkey_claimed_has_assignee",
            ),
        ]

    def __str__(self):
        return self.public_key
