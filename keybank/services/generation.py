# keybank/services/generation.py

"""
POOL GENERATION (ADMIN)

Display IDs:
- Format: PREFIX-NNNNNN (six digits, 100000..999999)
- Codes colliding with existing rows (or with each other) are re-drawn
- Bulk inserted inside one transaction

Key pairs:
- PUB-<uuid4> / PRIV-<uuid4>
- Only the public key + sha256(private key) are stored
- The private halves are returned ONCE to the caller
"""

from __future__ import annotations

import hashlib
import logging
import re
import secrets
import uuid
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings
from django.db import IntegrityError, transaction

from keybank.models import DisplayId, EncryptionKey
from keybank.services.exceptions import GenerationError

logger = logging.getLogger(__name__)

MAX_BATCH = 1000
CODE_MIN = 100000
CODE_SPAN = 900000
PREFIX_RE = re.compile(r"^[A-Z0-9]{1,10}$")
TWOPLACES = Decimal("0.01")

# Redraw rounds before giving up on a crowded prefix.
MAX_DRAW_ROUNDS = 20


@dataclass(frozen=True)
class GeneratedKeyPair:
    public_key: str
    private_key: str


def _validate_quantity(quantity) -> int:
    if isinstance(quantity, bool):
        raise GenerationError("quantity must be a whole number")
    try:
        qty = int(quantity)
    except (TypeError, ValueError) as exc:
        raise GenerationError("quantity must be a whole number") from exc
    if qty < 1 or qty > MAX_BATCH:
        raise GenerationError(f"quantity must be between 1 and {MAX_BATCH}")
    return qty


def _normalize_prefix(prefix: str | None) -> str:
    p = (prefix or settings.MARKETPLACE["DISPLAY_ID_PREFIX"]).strip().upper()
    if not PREFIX_RE.match(p):
        raise GenerationError("prefix must be 1-10 letters or digits")
    return p


def _draw_code(prefix: str) -> str:
    return f"{prefix}-{CODE_MIN + secrets.randbelow(CODE_SPAN)}"


def fingerprint(private_key: str) -> str:
    return hashlib.sha256(private_key.encode("utf-8")).hexdigest()


@transaction.atomic
def generate_display_ids(*, quantity, prefix: str | None = None) -> list[str]:
    qty = _validate_quantity(quantity)
    p = _normalize_prefix(prefix)

    codes: set[str] = set()
    for _ in range(MAX_DRAW_ROUNDS):
        missing = qty - len(codes)
        if missing <= 0:
            break
        drawn = {_draw_code(p) for _ in range(missing)}
        taken = set(DisplayId.objects.filter(code__in=drawn).values_list("code", flat=True))
        codes |= drawn - taken

    if len(codes) < qty:
        raise GenerationError(f"Could not draw {qty} unused display IDs for prefix {p}")

    ordered = sorted(codes)
    try:
        with transaction.atomic():
            DisplayId.objects.bulk_create([DisplayId(code=c) for c in ordered])
    except IntegrityError as exc:
        # A concurrent generator inserted one of our codes between the check and the insert.
        raise GenerationError("Display ID collision during insert; retry the request") from exc

    logger.info("Generated display IDs", extra={"prefix": p, "quantity": qty})
    return ordered


@transaction.atomic
def generate_key_pairs(*, quantity, base_price=None, owner=None) -> list[GeneratedKeyPair]:
    qty = _validate_quantity(quantity)

    raw_price = base_price if base_price not in (None, "") else settings.MARKETPLACE["KEY_BASE_PRICE"]
    try:
        price = Decimal(str(raw_price)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise GenerationError("base_price must be a valid decimal") from exc
    if price < Decimal("0.00"):
        raise GenerationError("base_price cannot be negative")

    downloads = int(settings.MARKETPLACE["KEY_DEFAULT_DOWNLOADS"])

    pairs = [
        GeneratedKeyPair(public_key=f"PUB-{uuid.uuid4()}", private_key=f"PRIV-{uuid.uuid4()}")
        for _ in range(qty)
    ]

    EncryptionKey.objects.bulk_create(
        [
            EncryptionKey(
                public_key=pair.public_key,
                private_key_fingerprint=fingerprint(pair.private_key),
                price=price,
                downloads_remaining=downloads,
                owner=owner,
            )
            for pair in pairs
        ]
    )

    logger.info(
        "Generated key pairs",
        extra={
            "quantity": qty,
            "price": str(price),
            "owner_id": str(getattr(owner, "id", "") or ""),
        },
    )
    return pairs
