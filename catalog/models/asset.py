# catalog/models/asset.py

"""
DIGITAL ASSET

What a creator sells access to (software, ebook, service, media).

- price is the consumer price; Command Cards for the asset are redeemed for access
- published gates marketplace visibility, orders and distribution bids
- display_id is drawn once from the keybank pool and never re-bound
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q


class DigitalAsset(models.Model):
    TYPE_SOFTWARE = "software"
    TYPE_EBOOK = "ebook"
    TYPE_SERVICE = "service"
    TYPE_MEDIA = "media"
    TYPE_OTHER = "other"

    TYPE_CHOICES = [
        (TYPE_SOFTWARE, "Software"),
        (TYPE_EBOOK, "Ebook"),
        (TYPE_SERVICE, "Service"),
        (TYPE_MEDIA, "Media"),
        (TYPE_OTHER, "Other"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="assets",
    )

    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_OTHER)

    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    published = models.BooleanField(default=False)

    # Type-specific details (version/platform for software, duration/location for services...)
    metadata = models.JSONField(default=dict, blank=True)

    cover_image_url = models.URLField(max_length=500, blank=True)
    master_file_url = models.URLField(max_length=500, blank=True)

    display_id = models.OneToOneField(
        "keybank.DisplayId",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="asset",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["creator", "created_at"], name="catalog_asset_creator_idx"),
            models.Index(fields=["published", "created_at"], name="catalog_asset_published_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(price__gte=0),
                name="chk_digitalasset_price_gte_zero",
            ),
        ]

    def clean(self):
        if not (self.title or "").strip():
            raise ValidationError({"title": "title is required"})
        if not isinstance(self.metadata, dict):
            raise ValidationError({"metadata": "metadata must be an object"})

    def __str__(self):
        return f"{self.title} ({self.type})"
