# cards/services/redemption.py

"""
COMMAND CARD REDEMPTION

A consumer presents (serial_code, display_id, public_key). Redemption is one
atomic unit of work:

1) lock card, display ID and key rows (always in that order)
2) verify the display ID and key are the ones bound to the card
3) replay by the same user -> original Redemption, no writes
4) compare-and-swap:
     card     active -> redeemed
     display  claimed False -> True
     key      claimed False -> True, assigned_to = user
   any zero-row update aborts the whole transaction
5) Redemption (unique per card) + AssetAccessLog(method=card)
6) complete the card's assignment when nothing is left outstanding

A duplicate Redemption insert (IntegrityError) means another request won the
race; it is re-resolved as a replay or an AlreadyRedeemedError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import IntegrityError, transaction
from django.utils import timezone

from cards.models import AssetAccessLog, CommandCard, Redemption
from cards.services.exceptions import (
    AlreadyClaimedError,
    AlreadyRedeemedError,
    CardNotActiveError,
    CredentialMismatchError,
    InvalidDisplayIdError,
    InvalidPublicKeyError,
    InvalidSerialError,
    RedemptionConflictError,
)
from cards.services.serials import normalize_serial
from distribution.services.allocation import complete_assignment_if_done
from keybank.models import DisplayId, EncryptionKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RedemptionResult:
    redemption: Redemption
    replayed: bool = False


def _resolve_existing(*, card_id, user) -> RedemptionResult:
    existing = Redemption.objects.select_related("asset").filter(card_id=card_id).first()
    if existing is not None and existing.user_id == user.id:
        return RedemptionResult(redemption=existing, replayed=True)
    raise AlreadyRedeemedError("This card has already been redeemed")


def _cas(updated: int, what: str) -> None:
    if updated != 1:
        raise RedemptionConflictError(f"Concurrent update on {what}; nothing was redeemed")


@transaction.atomic
def _redeem_locked(*, user, serial: str, code: str, public_key: str) -> RedemptionResult:
    card = CommandCard.objects.select_for_update().filter(serial_code=serial).first()
    if card is None:
        raise InvalidSerialError("Unknown serial code")

    display_id = DisplayId.objects.select_for_update().filter(code=code).first()
    if display_id is None:
        raise InvalidDisplayIdError("Unknown display ID")

    key = EncryptionKey.objects.select_for_update().filter(public_key=public_key).first()
    if key is None:
        raise InvalidPublicKeyError("Unknown public key")

    if card.display_id_id != display_id.pk or card.encryption_key_id != key.pk:
        raise CredentialMismatchError("Display ID and public key do not match this card")

    if card.status == CommandCard.STATUS_REDEEMED:
        return _resolve_existing(card_id=card.pk, user=user)
    if card.status != CommandCard.STATUS_ACTIVE:
        raise CardNotActiveError(f"Card is not active (status={card.status})")
    if display_id.claimed or key.claimed:
        raise AlreadyClaimedError("Display ID or public key has already been claimed")

    now = timezone.now()

    _cas(
        CommandCard.objects.filter(pk=card.pk, status=CommandCard.STATUS_ACTIVE).update(
            status=CommandCard.STATUS_REDEEMED,
            redeemed_by=user,
            redeemed_at=now,
        ),
        "card",
    )
    _cas(
        DisplayId.objects.filter(pk=display_id.pk, claimed=False).update(claimed=True, claimed_at=now),
        "display ID",
    )
    _cas(
        EncryptionKey.objects.filter(pk=key.pk, claimed=False).update(
            claimed=True,
            claimed_at=now,
            assigned_to=user,
        ),
        "encryption key",
    )

    redemption = Redemption.objects.create(
        card=card,
        user=user,
        asset_id=card.asset_id,
        display_id=display_id,
        encryption_key=key,
    )
    AssetAccessLog.objects.create(
        user=user,
        asset_id=card.asset_id,
        method=AssetAccessLog.METHOD_CARD,
        redemption=redemption,
    )

    if card.assignment_id:
        complete_assignment_if_done(assignment_id=card.assignment_id)

    return RedemptionResult(redemption=redemption, replayed=False)


def redeem_card(*, user, serial_code, display_id, public_key) -> RedemptionResult:
    serial = normalize_serial(serial_code)
    code = str(display_id or "").strip().upper()
    pub = str(public_key or "").strip()

    if not serial:
        raise InvalidSerialError("serial_code is required")
    if not code:
        raise InvalidDisplayIdError("display_id is required")
    if not pub:
        raise InvalidPublicKeyError("public_key is required")

    try:
        result = _redeem_locked(user=user, serial=serial, code=code, public_key=pub)
    except IntegrityError as exc:
        existing = Redemption.objects.filter(card__serial_code=serial).first()
        if existing is None:
            raise RedemptionConflictError("Redemption could not be recorded") from exc
        if existing.user_id != user.id:
            raise AlreadyRedeemedError("This card has already been redeemed") from exc
        logger.warning(
            "Redemption race resolved as replay",
            extra={"card_id": str(existing.card_id), "user_id": str(user.id)},
        )
        return RedemptionResult(redemption=existing, replayed=True)

    logger.info(
        "Card redeemed" if not result.replayed else "Card redemption replayed",
        extra={
            "redemption_id": str(result.redemption.id),
            "card_id": str(result.redemption.card_id),
            "user_id": str(user.id),
            "replayed": result.replayed,
        },
    )
    return result
