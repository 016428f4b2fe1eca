# cards/services/issuance.py

"""
CARD ISSUANCE & RETAIL ACTIVATION

issue_cards (admin):
- assignment must be pending
- binds `quantity` free display IDs + free encryption keys to new cards
- pool rows are locked with SKIP LOCKED so concurrent issuers never share a row
- short pool -> InsufficientPoolError, nothing written
- assignment -> active

activate_cards (retailer):
- issued -> active for cards the retailer holds (conditional update)
- everything else is reported back, never silently changed

void_card (admin):
- issued | active -> void
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.db import transaction
from django.utils import timezone

from cards.models import CommandCard
from cards.services.exceptions import (
    CardPermissionError,
    CardStateError,
    InsufficientPoolError,
    IssuanceError,
)
from cards.services.serials import generate_serial
from distribution.models import DistributionAssignment
from distribution.services.allocation import complete_assignment_if_done
from keybank.services.pool import lock_free_display_ids, lock_free_encryption_keys
from permissions.roles import is_admin

logger = logging.getLogger(__name__)

MAX_SERIAL_ROUNDS = 10


@dataclass
class ActivationResult:
    activated: int = 0
    rejected: list[dict] = field(default_factory=list)


def _unique_serials(count: int) -> list[str]:
    serials: set[str] = set()
    for _ in range(MAX_SERIAL_ROUNDS):
        missing = count - len(serials)
        if missing <= 0:
            break
        drawn = {generate_serial() for _ in range(missing)}
        taken = set(CommandCard.objects.filter(serial_code__in=drawn).values_list("serial_code", flat=True))
        serials |= drawn - taken

    if len(serials) < count:
        raise IssuanceError("Could not draw unique serial codes; retry the request")
    return sorted(serials)


@transaction.atomic
def issue_cards(*, assignment: DistributionAssignment, issuer=None) -> list[CommandCard]:
    if issuer is not None and not is_admin(issuer):
        raise CardPermissionError("Only admins can issue cards")

    assignment = (
        DistributionAssignment.objects.select_for_update(of=("self",))
        .select_related("bid")
        .get(pk=assignment.pk)
    )
    if assignment.status != DistributionAssignment.STATUS_PENDING:
        raise IssuanceError(f"Cards can only be issued for pending assignments (status={assignment.status})")

    qty = int(assignment.quantity)

    display_ids = lock_free_display_ids(qty)
    if len(display_ids) < qty:
        raise InsufficientPoolError(f"Need {qty} free display IDs but only {len(display_ids)} are available")

    keys = lock_free_encryption_keys(qty)
    if len(keys) < qty:
        raise InsufficientPoolError(f"Need {qty} free encryption keys but only {len(keys)} are available")

    serials = _unique_serials(qty)

    cards = CommandCard.objects.bulk_create(
        [
            CommandCard(
                serial_code=serial,
                asset_id=assignment.bid.asset_id,
                assignment=assignment,
                retailer_id=assignment.retailer_id,
                display_id=display_id,
                encryption_key=key,
                status=CommandCard.STATUS_ISSUED,
            )
            for serial, display_id, key in zip(serials, display_ids, keys)
        ]
    )

    assignment.status = DistributionAssignment.STATUS_ACTIVE
    assignment.activated_at = timezone.now()
    assignment.save(update_fields=["status", "activated_at"])

    logger.info(
        "Cards issued",
        extra={
            "assignment_id": str(assignment.id),
            "retailer_id": str(assignment.retailer_id),
            "quantity": qty,
        },
    )
    return cards


@transaction.atomic
def activate_cards(*, retailer, card_ids) -> ActivationResult:
    result = ActivationResult()

    wanted = []
    for raw in card_ids or []:
        key = str(raw)
        if key not in wanted:
            wanted.append(key)
    if not wanted:
        return result

    rows = {
        str(card.pk): card
        for card in CommandCard.objects.select_for_update().filter(pk__in=wanted)
    }

    eligible = []
    for card_id in wanted:
        card = rows.get(card_id)
        if card is None or card.retailer_id != retailer.id:
            result.rejected.append({"id": card_id, "reason": "not_found"})
        elif card.status != CommandCard.STATUS_ISSUED:
            result.rejected.append({"id": card_id, "reason": f"status_{card.status}"})
        else:
            eligible.append(card.pk)

    if eligible:
        result.activated = CommandCard.objects.filter(
            pk__in=eligible,
            retailer=retailer,
            status=CommandCard.STATUS_ISSUED,
        ).update(status=CommandCard.STATUS_ACTIVE, activated_at=timezone.now())

    logger.info(
        "Cards activated",
        extra={
            "retailer_id": str(retailer.id),
            "activated": result.activated,
            "rejected": len(result.rejected),
        },
    )
    return result


@transaction.atomic
def void_card(*, card: CommandCard, user) -> CommandCard:
    if not is_admin(user):
        raise CardPermissionError("Only admins can void cards")

    card = CommandCard.objects.select_for_update().get(pk=card.pk)
    if card.status not in (CommandCard.STATUS_ISSUED, CommandCard.STATUS_ACTIVE):
        raise CardStateError(f"Card cannot be voided (status={card.status})")

    card.status = CommandCard.STATUS_VOID
    card.voided_at = timezone.now()
    card.save(update_fields=["status", "voided_at"])

    logger.info("Card voided", extra={"card_id": str(card.id), "serial_code": card.serial_code})

    if card.assignment_id:
        complete_assignment_if_done(assignment_id=card.assignment_id)
    return card
