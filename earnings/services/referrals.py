# earnings/services/referrals.py

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from earnings.models import Referral

logger = logging.getLogger(__name__)


@transaction.atomic
def record_referral(*, referrer_code: str, referred) -> Referral | None:
    """
    Link `referred` to the owner of `referrer_code`.

    Unknown codes, self-referrals and already-referred users are ignored (None).
    """
    code = (referrer_code or "").strip().upper()
    if not code:
        return None

    User = get_user_model()
    referrer = User.objects.filter(referral_code=code).first()
    if referrer is None or referrer.pk == referred.pk:
        logger.info("Referral ignored", extra={"referred_id": str(referred.pk), "code": code})
        return None

    if Referral.objects.filter(referred=referred).exists():
        return None

    try:
        with transaction.atomic():
            referral = Referral.objects.create(referrer=referrer, referred=referred)
    except IntegrityError:
        return None

    logger.info(
        "Referral recorded",
        extra={"referrer_id": str(referrer.pk), "referred_id": str(referred.pk)},
    )
    return referral
