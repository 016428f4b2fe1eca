# distribution/services/allocation.py

"""
BID ALLOCATOR

Invariant (per bid):
    sum(quantity of live assignments) == bid.quantity_reserved <= bid.quantity

Concurrency:
- allocate() locks the bid row (SELECT ... FOR UPDATE), so allocations on one
  bid are serialised.
- quantity_reserved is moved with guarded conditional UPDATEs; a zero-row
  update means the guard failed and nothing is written.

Lock order is always assignment -> bid.
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from cards.models import CommandCard
from distribution.models import DistributionAssignment, DistributionBid
from distribution.services.exceptions import (
    AssignmentStateError,
    BidPermissionError,
    BidStateError,
    DuplicateAssignmentError,
    OverAllocationError,
)
from permissions.roles import ROLE_RETAILER, get_user_role, is_admin

logger = logging.getLogger(__name__)


def _parse_quantity(quantity, *, remaining: int) -> int:
    if quantity in (None, ""):
        return remaining
    if isinstance(quantity, bool):
        raise OverAllocationError("quantity must be a whole number")
    try:
        return int(quantity)
    except (TypeError, ValueError) as exc:
        raise OverAllocationError("quantity must be a whole number") from exc


@transaction.atomic
def allocate(*, bid: DistributionBid, retailer, quantity=None) -> DistributionAssignment:
    """
    Reserve `quantity` cards of an open bid for a retailer.

    quantity defaults to everything still unreserved.
    """
    if get_user_role(retailer) != ROLE_RETAILER:
        raise BidPermissionError("Bids can only be allocated to retailers")

    bid = DistributionBid.objects.select_for_update().get(pk=bid.pk)
    if bid.status != DistributionBid.STATUS_OPEN:
        raise BidStateError(f"Bid is not open for allocation (status={bid.status})")

    remaining = bid.quantity_remaining
    qty = _parse_quantity(quantity, remaining=remaining)
    if qty <= 0:
        raise OverAllocationError("quantity must be greater than zero")
    if qty > remaining:
        raise OverAllocationError(f"Requested {qty} but only {remaining} remain on this bid")

    if (
        DistributionAssignment.objects.filter(bid=bid, retailer=retailer)
        .exclude(status=DistributionAssignment.STATUS_CANCELLED)
        .exists()
    ):
        raise DuplicateAssignmentError("Retailer already holds an assignment on this bid")

    now = timezone.now()
    updated = DistributionBid.objects.filter(
        pk=bid.pk,
        status=DistributionBid.STATUS_OPEN,
        quantity_reserved__lte=F("quantity") - qty,
    ).update(quantity_reserved=F("quantity_reserved") + qty, updated_at=now)
    if updated != 1:
        raise OverAllocationError("Bid capacity changed during allocation; retry")

    try:
        with transaction.atomic():
            assignment = DistributionAssignment.objects.create(
                bid=bid,
                retailer=retailer,
                quantity=qty,
                status=DistributionAssignment.STATUS_PENDING,
            )
    except IntegrityError as exc:
        raise DuplicateAssignmentError("Retailer already holds an assignment on this bid") from exc

    bid.refresh_from_db(fields=["quantity_reserved", "status", "updated_at"])
    if bid.quantity_reserved == bid.quantity:
        DistributionBid.objects.filter(pk=bid.pk, status=DistributionBid.STATUS_OPEN).update(
            status=DistributionBid.STATUS_ACCEPTED,
            updated_at=now,
        )

    logger.info(
        "Bid allocated",
        extra={
            "bid_id": str(bid.id),
            "assignment_id": str(assignment.id),
            "retailer_id": str(retailer.id),
            "quantity": qty,
            "reserved": bid.quantity_reserved,
        },
    )
    return assignment


@transaction.atomic
def cancel_assignment(*, assignment: DistributionAssignment, user) -> DistributionAssignment:
    assignment = DistributionAssignment.objects.select_for_update().get(pk=assignment.pk)

    if assignment.retailer_id != getattr(user, "id", None) and not is_admin(user):
        raise BidPermissionError("Only the assigned retailer or an admin can cancel this assignment")
    if assignment.status != DistributionAssignment.STATUS_PENDING:
        raise AssignmentStateError(
            f"Only pending assignments can be cancelled (status={assignment.status})"
        )

    bid = DistributionBid.objects.select_for_update().get(pk=assignment.bid_id)
    now = timezone.now()

    updated = DistributionBid.objects.filter(
        pk=bid.pk,
        quantity_reserved__gte=assignment.quantity,
    ).update(quantity_reserved=F("quantity_reserved") - assignment.quantity, updated_at=now)
    if updated != 1:
        raise AssignmentStateError("Bid reservation is inconsistent with this assignment")

    DistributionBid.objects.filter(pk=bid.pk, status=DistributionBid.STATUS_ACCEPTED).update(
        status=DistributionBid.STATUS_OPEN,
        updated_at=now,
    )

    assignment.status = DistributionAssignment.STATUS_CANCELLED
    assignment.cancelled_at = now
    assignment.save(update_fields=["status", "cancelled_at"])

    logger.info(
        "Assignment cancelled",
        extra={"assignment_id": str(assignment.id), "bid_id": str(bid.id), "released": assignment.quantity},
    )
    return assignment


def _maybe_fulfil_bid(*, bid_id, now) -> bool:
    bid = DistributionBid.objects.select_for_update().get(pk=bid_id)
    if bid.status != DistributionBid.STATUS_ACCEPTED or bid.quantity_reserved != bid.quantity:
        return False

    unfinished = (
        DistributionAssignment.objects.filter(bid_id=bid.pk)
        .exclude(status__in=[DistributionAssignment.STATUS_COMPLETED, DistributionAssignment.STATUS_CANCELLED])
        .exists()
    )
    if unfinished:
        return False

    DistributionBid.objects.filter(pk=bid.pk, status=DistributionBid.STATUS_ACCEPTED).update(
        status=DistributionBid.STATUS_FULFILLED,
        updated_at=now,
    )
    logger.info("Bid fulfilled", extra={"bid_id": str(bid.id)})
    return True


@transaction.atomic
def complete_assignment_if_done(*, assignment_id) -> bool:
    """
    Complete an active assignment once none of its cards are still outstanding.
    Returns True when the assignment was completed by this call.
    """
    assignment = DistributionAssignment.objects.select_for_update().get(pk=assignment_id)
    if assignment.status != DistributionAssignment.STATUS_ACTIVE:
        return False

    outstanding = CommandCard.objects.filter(
        assignment_id=assignment.pk,
        status__in=[CommandCard.STATUS_ISSUED, CommandCard.STATUS_ACTIVE],
    ).exists()
    if outstanding:
        return False

    now = timezone.now()
    assignment.status = DistributionAssignment.STATUS_COMPLETED
    assignment.completed_at = now
    assignment.save(update_fields=["status", "completed_at"])

    logger.info("Assignment completed", extra={"assignment_id": str(assignment.id)})

    _maybe_fulfil_bid(bid_id=assignment.bid_id, now=now)
    return True


@transaction.atomic
def complete_assignment(*, assignment: DistributionAssignment) -> DistributionAssignment:
    assignment = DistributionAssignment.objects.select_for_update().get(pk=assignment.pk)
    if assignment.status == DistributionAssignment.STATUS_COMPLETED:
        return assignment
    if assignment.status != DistributionAssignment.STATUS_ACTIVE:
        raise AssignmentStateError(
            f"Only active assignments can be completed (status={assignment.status})"
        )

    if not complete_assignment_if_done(assignment_id=assignment.pk):
        raise AssignmentStateError("Assignment still has cards that are neither redeemed nor void")

    assignment.refresh_from_db()
    return assignment
