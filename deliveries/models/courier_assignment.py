# deliveries/models/courier_assignment.py

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q


class CourierAssignment(models.Model):
    """
    A courier's job for one delivery. At most one `assigned` row per delivery.
    """

    STATUS_ASSIGNED = "assigned"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_ASSIGNED, "Assigned"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    delivery = models.ForeignKey(
        "deliveries.Delivery",
        on_delete=models.PROTECT,
        related_name="courier_assignments",
    )
    courier = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="courier_assignments",
    )

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ASSIGNED)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["courier", "status"], name="deliveries_courier_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["delivery"],
                condition=Q(status="assigned"),
                name="uniq_live_courier_per_delivery",
            ),
        ]

    def __str__(self):
        return f"{self.courier_id} -> {self.delivery_id} ({self.status})"
