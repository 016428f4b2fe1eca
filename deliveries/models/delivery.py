# deliveries/models/delivery.py

"""
DELIVERY

A sender ships an asset to the holder of a recipient public key.

    pending -> picked_up -> in_transit -> delivered

encrypted_label is base64 of the shipping label (opaque to the platform,
copied by the courier). It is an encoding, not encryption.
"""

import uuid

from django.conf import settings
from django.db import models


class Delivery(models.Model):
    STATUS_PENDING = "pending"
    STATUS_PICKED_UP = "picked_up"
    STATUS_IN_TRANSIT = "in_transit"
    STATUS_DELIVERED = "delivered"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PICKED_UP, "Picked up"),
        (STATUS_IN_TRANSIT, "In transit"),
        (STATUS_DELIVERED, "Delivered"),
    ]

    NEXT_STATUS = {
        STATUS_PENDING: STATUS_PICKED_UP,
        STATUS_PICKED_UP: STATUS_IN_TRANSIT,
        STATUS_IN_TRANSIT: STATUS_DELIVERED,
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="sent_deliveries",
    )
    asset = models.ForeignKey(
        "catalog.DigitalAsset",
        on_delete=models.PROTECT,
        related_name="deliveries",
    )

    recipient_pubkey = models.CharField(max_length=64)
    encrypted_label = models.TextField()

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    delivered_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "deliveries"
        indexes = [
            models.Index(fields=["status", "created_at"], name="deliveries_status_idx"),
            models.Index(fields=["sender", "created_at"], name="deliveries_sender_idx"),
        ]

    def __str__(self):
        return f"Delivery {self.id} ({self.status})"
