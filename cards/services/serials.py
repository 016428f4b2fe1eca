# cards/services/serials.py

"""
SERIAL CODES

Format: XXXX-XXXX-XXXX-XXXX over an alphabet without look-alikes (no 0/O, 1/I).
"""

from __future__ import annotations

import re
import secrets

SERIAL_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
GROUPS = 4
GROUP_SIZE = 4

SERIAL_RE = re.compile(r"^[A-Z0-9]{4}(-[A-Z0-9]{4}){3}$")


def generate_serial() -> str:
    return "-".join(
        "".join(secrets.choice(SERIAL_ALPHABET) for _ in range(GROUP_SIZE))
        for _ in range(GROUPS)
    )


def normalize_serial(raw) -> str:
    """
    Upper-case and re-group user input ("abcd efgh-ijkl mnop" -> "ABCD-EFGH-IJKL-MNOP").
    Returns the stripped, upper-cased input unchanged if it cannot be re-grouped.
    """
    s = str(raw or "").strip().upper()
    compact = re.sub(r"[\s-]", "", s)
    if len(compact) == GROUPS * GROUP_SIZE and compact.isalnum():
        return "-".join(compact[i : i + GROUP_SIZE] for i in range(0, len(compact), GROUP_SIZE))
    return s
