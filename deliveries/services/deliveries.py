# deliveries/services/deliveries.py

"""
DELIVERY SERVICES

- create_delivery:           sender queues a delivery (label stored base64-encoded)
- assign_courier:            admin hands a pending delivery to a courier
- advance_delivery:          assigned courier moves it one step forward
                             delivered -> recipient key holder gets access
- cancel_courier_assignment: courier/admin drops a live job; delivery back to pending

Lock order is always delivery -> courier assignment.
"""

from __future__ import annotations

import base64
import logging

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from cards.models import AssetAccessLog
from catalog.models import DigitalAsset
from deliveries.models import CourierAssignment, Delivery
from deliveries.services.exceptions import (
    DeliveryPermissionError,
    DeliveryStateError,
    DeliveryValidationError,
)
from keybank.models import EncryptionKey
from permissions.roles import ROLE_COURIER, get_user_role, is_admin

logger = logging.getLogger(__name__)


def encode_label(label: str) -> str:
    return base64.b64encode(label.encode("utf-8")).decode("ascii")


def decode_label(encoded: str) -> str:
    return base64.b64decode(encoded.encode("ascii")).decode("utf-8")


@transaction.atomic
def create_delivery(*, sender, asset: DigitalAsset, recipient_pubkey: str, label: str) -> Delivery:
    pubkey = (recipient_pubkey or "").strip()
    text = (label or "").strip()

    if not pubkey:
        raise DeliveryValidationError("recipient_pubkey is required")
    if not text:
        raise DeliveryValidationError("label is required")
    if not asset.published and asset.creator_id != getattr(sender, "id", None):
        raise DeliveryValidationError("Asset is not available for delivery")

    delivery = Delivery.objects.create(
        sender=sender,
        asset=asset,
        recipient_pubkey=pubkey,
        encrypted_label=encode_label(text),
    )

    logger.info(
        "Delivery created",
        extra={"delivery_id": str(delivery.id), "asset_id": str(asset.id), "sender_id": str(sender.id)},
    )
    return delivery


@transaction.atomic
def assign_courier(*, delivery: Delivery, courier, assigner) -> CourierAssignment:
    if not is_admin(assigner):
        raise DeliveryPermissionError("Only admins can assign couriers")
    if get_user_role(courier) != ROLE_COURIER:
        raise DeliveryValidationError("Assignee must be a courier")

    delivery = Delivery.objects.select_for_update().get(pk=delivery.pk)
    if delivery.status != Delivery.STATUS_PENDING:
        raise DeliveryStateError(f"Only pending deliveries can be assigned (status={delivery.status})")
    if delivery.courier_assignments.filter(status=CourierAssignment.STATUS_ASSIGNED).exists():
        raise DeliveryStateError("Delivery already has a courier")

    try:
        with transaction.atomic():
            assignment = CourierAssignment.objects.create(delivery=delivery, courier=courier)
    except IntegrityError as exc:
        raise DeliveryStateError("Delivery already has a courier") from exc

    logger.info(
        "Courier assigned",
        extra={"delivery_id": str(delivery.id), "courier_id": str(courier.id)},
    )
    return assignment


def _grant_recipient_access(delivery: Delivery) -> AssetAccessLog | None:
    # The redeemer (assigned_to) wins over the buyer (owner) of the key.
    key = (
        EncryptionKey.objects.filter(public_key=delivery.recipient_pubkey)
        .filter(Q(assigned_to__isnull=False) | Q(owner__isnull=False))
        .only("assigned_to_id", "owner_id")
        .first()
    )
    if key is None:
        return None
    return AssetAccessLog.objects.create(
        user_id=key.assigned_to_id or key.owner_id,
        asset_id=delivery.asset_id,
        method=AssetAccessLog.METHOD_DELIVERY,
        reference=str(delivery.id),
    )


@transaction.atomic
def advance_delivery(*, delivery: Delivery, courier) -> Delivery:
    delivery = Delivery.objects.select_for_update().get(pk=delivery.pk)

    assignment = (
        CourierAssignment.objects.select_for_update()
        .filter(delivery=delivery, courier=courier, status=CourierAssignment.STATUS_ASSIGNED)
        .first()
    )
    if assignment is None:
        raise DeliveryPermissionError("Delivery is not assigned to this courier")

    next_status = Delivery.NEXT_STATUS.get(delivery.status)
    if next_status is None:
        raise DeliveryStateError(f"Delivery cannot advance (status={delivery.status})")

    delivery.status = next_status
    update_fields = ["status", "updated_at"]

    if next_status == Delivery.STATUS_DELIVERED:
        delivery.delivered_at = timezone.now()
        update_fields.append("delivered_at")

    delivery.save(update_fields=update_fields)

    if next_status == Delivery.STATUS_DELIVERED:
        assignment.status = CourierAssignment.STATUS_COMPLETED
        assignment.save(update_fields=["status", "updated_at"])
        access = _grant_recipient_access(delivery)
        logger.info(
            "Delivery completed",
            extra={"delivery_id": str(delivery.id), "access_granted": access is not None},
        )
    else:
        logger.info(
            "Delivery advanced",
            extra={"delivery_id": str(delivery.id), "status": next_status},
        )
    return delivery


@transaction.atomic
def cancel_courier_assignment(*, assignment: CourierAssignment, courier) -> CourierAssignment:
    delivery = Delivery.objects.select_for_update().get(pk=assignment.delivery_id)
    assignment = CourierAssignment.objects.select_for_update().get(pk=assignment.pk)

    if assignment.courier_id != getattr(courier, "id", None) and not is_admin(courier):
        raise DeliveryPermissionError("Only the assigned courier or an admin can cancel this job")
    if assignment.status != CourierAssignment.STATUS_ASSIGNED:
        raise DeliveryStateError(f"Assignment is not live (status={assignment.status})")
    if delivery.status == Delivery.STATUS_DELIVERED:
        raise DeliveryStateError("Delivery is already delivered")

    assignment.status = CourierAssignment.STATUS_CANCELLED
    assignment.save(update_fields=["status", "updated_at"])

    delivery.status = Delivery.STATUS_PENDING
    delivery.save(update_fields=["status", "updated_at"])

    logger.info(
        "Courier assignment cancelled",
        extra={"delivery_id": str(delivery.id), "assignment_id": str(assignment.id)},
    )
    return assignment
