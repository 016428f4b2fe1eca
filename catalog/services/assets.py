# catalog/services/assets.py

"""
ASSET SERVICES

- toggle_publish: owner (or admin) flips marketplace visibility
- assign_display_id: bind one pool display ID to an asset, exactly once
"""

from __future__ import annotations

import logging

from django.db import transaction

from catalog.models import DigitalAsset
from catalog.services.exceptions import AssetPermissionError
from keybank.services.pool import claim_next_display_id
from permissions.roles import is_admin

logger = logging.getLogger(__name__)


def _require_owner_or_admin(*, asset: DigitalAsset, user) -> None:
    if asset.creator_id == getattr(user, "id", None) or is_admin(user):
        return
    raise AssetPermissionError("Only the asset's creator can change it")


@transaction.atomic
def toggle_publish(*, asset: DigitalAsset, user) -> DigitalAsset:
    asset = DigitalAsset.objects.select_for_update().get(pk=asset.pk)
    _require_owner_or_admin(asset=asset, user=user)

    asset.published = not asset.published
    asset.save(update_fields=["published", "updated_at"])

    logger.info(
        "Asset publication toggled",
        extra={"asset_id": str(asset.id), "published": asset.published},
    )
    return asset


@transaction.atomic
def assign_display_id(*, asset: DigitalAsset, user=None) -> DigitalAsset:
    """
    Idempotent: an asset that already carries a display ID keeps it.
    Raises DisplayIdPoolExhausted when the pool is empty.
    """
    asset = DigitalAsset.objects.select_for_update().select_related("display_id").get(pk=asset.pk)
    if user is not None:
        _require_owner_or_admin(asset=asset, user=user)

    if asset.display_id_id:
        return asset

    display_id = claim_next_display_id()
    asset.display_id = display_id
    asset.save(update_fields=["display_id", "updated_at"])

    logger.info(
        "Display ID bound to asset",
        extra={"asset_id": str(asset.id), "display_id": display_id.code},
    )
    return asset
