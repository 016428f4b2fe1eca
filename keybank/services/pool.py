# keybank/services/pool.py

"""
POOL ACCESS

"Free" means: not claimed AND not yet bound to an asset or a card.
Callers must already be inside transaction.atomic(); rows are locked with
SELECT ... FOR UPDATE SKIP LOCKED so concurrent issuers never pick the same row.
"""

from __future__ import annotations

from django.db import transaction
from django.utils import timezone

from keybank.models import DisplayId, EncryptionKey
from keybank.services.exceptions import DisplayIdPoolExhausted


def free_display_ids():
    return DisplayId.objects.filter(
        claimed=False,
        asset__isnull=True,
        card__isnull=True,
    )


def free_encryption_keys():
    return EncryptionKey.objects.filter(
        claimed=False,
        owner__isnull=True,
        card__isnull=True,
    )


def lock_free_display_ids(count: int) -> list[DisplayId]:
    return list(
        free_display_ids()
        .select_for_update(skip_locked=True, of=("self",))
        .order_by("created_at", "code")[:count]
    )


def lock_free_encryption_keys(count: int) -> list[EncryptionKey]:
    return list(
        free_encryption_keys()
        .select_for_update(skip_locked=True, of=("self",))
        .order_by("created_at", "public_key")[:count]
    )


@transaction.atomic
def claim_next_display_id() -> DisplayId:
    """
    Claim one free display ID outright (asset binding path).
    """
    rows = lock_free_display_ids(1)
    if not rows:
        raise DisplayIdPoolExhausted("No unclaimed display IDs left in the pool")

    display_id = rows[0]
    display_id.claimed = True
    display_id.claimed_at = timezone.now()
    display_id.save(update_fields=["claimed", "claimed_at"])
    return display_id
