# distribution/models/assignment.py

"""
DISTRIBUTION ASSIGNMENT

One retailer's reserved slice of a bid.

- pending:   reserved, no cards yet (cancellable, quantity goes back to the bid)
- active:    cards issued to the retailer
- completed: every card redeemed or voided
- cancelled: released before issuance

A retailer holds at most one live (non-cancelled) assignment per bid.
"""

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q


class DistributionAssignment(models.Model):
    STATUS_PENDING = "pending"
    STATUS_ACTIVE = "active"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACTIVE, "Active"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    LIVE_STATUSES = (STATUS_PENDING, STATUS_ACTIVE, STATUS_COMPLETED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    bid = models.ForeignKey(
        "distribution.DistributionBid",
        on_delete=models.PROTECT,
        related_name="assignments",
    )
    retailer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="distribution_assignments",
    )

    quantity = models.PositiveIntegerField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)

    assigned_at = models.DateTimeField(auto_now_add=True)
    activated_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-assigned_at"]
        indexes = [
            models.Index(fields=["retailer", "status"], name="distribution_asg_retailer_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_assignment_quantity_gt_zero",
            ),
            models.UniqueConstraint(
                fields=["bid", "retailer"],
                condition=~Q(status="cancelled"),
                name="uniq_live_assignment_per_retailer",
            ),
        ]

    @property
    def is_live(self) -> bool:
        return self.status in self.LIVE_STATUSES

    def __str__(self):
        return f"Assignment {self.id} ({self.status}) x{self.quantity}"
