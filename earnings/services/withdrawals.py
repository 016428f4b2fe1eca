# earnings/services/withdrawals.py

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from earnings.models import WithdrawalRequest
from earnings.services.calculators import quantize_money, available_balance
from earnings.services.exceptions import (
    InsufficientBalanceError,
    WithdrawalError,
    WithdrawalPermissionError,
    WithdrawalStateError,
)
from permissions.roles import is_admin

logger = logging.getLogger(__name__)


@transaction.atomic
def request_withdrawal(*, user, amount=None) -> WithdrawalRequest:
    """
    amount defaults to the full available balance.
    The user row lock serialises concurrent requests by the same user.
    """
    User = get_user_model()
    User.objects.select_for_update().get(pk=user.pk)

    balance = available_balance(user)

    if amount in (None, ""):
        value = balance
    else:
        try:
            value = quantize_money(Decimal(str(amount)))
        except (InvalidOperation, ValueError) as exc:
            raise WithdrawalError("amount must be a valid decimal") from exc

    if value <= Decimal("0.00"):
        raise InsufficientBalanceError("Nothing available to withdraw")
    if value > balance:
        raise InsufficientBalanceError(f"Requested {value} exceeds available balance {balance}")

    req = WithdrawalRequest.objects.create(user=user, amount_requested=value)

    logger.info(
        "Withdrawal requested",
        extra={"withdrawal_id": str(req.id), "user_id": str(user.pk), "amount": str(value)},
    )
    return req


@transaction.atomic
def review_withdrawal(*, request: WithdrawalRequest, reviewer, approve: bool) -> WithdrawalRequest:
    if not is_admin(reviewer):
        raise WithdrawalPermissionError("Only admins can review withdrawals")

    req = WithdrawalRequest.objects.select_for_update().get(pk=request.pk)
    if req.status != WithdrawalRequest.STATUS_PENDING:
        raise WithdrawalStateError(f"Withdrawal already reviewed (status={req.status})")

    req.status = WithdrawalRequest.STATUS_APPROVED if approve else WithdrawalRequest.STATUS_REJECTED
    req.reviewed_at = timezone.now()
    req.reviewed_by = reviewer
    req.save(update_fields=["status", "reviewed_at", "reviewed_by"])

    logger.info(
        "Withdrawal reviewed",
        extra={"withdrawal_id": str(req.id), "approved": bool(approve), "reviewer_id": str(reviewer.pk)},
    )
    return req
