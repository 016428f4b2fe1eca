# earnings/models/referral.py

import uuid

from django.conf import settings
from django.db import models
from django.db.models import F, Q


class Referral(models.Model):
    """
    One row per referred user. The referrer earns REFERRAL_REWARD per row.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    referrer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="referrals_made",
    )
    referred = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="referral_received",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=~Q(referrer=F("referred")),
                name="chk_referral_not_self",
            ),
        ]

    def __str__(self):
        return f"{self.referrer_id} referred {self.referred_id}"
