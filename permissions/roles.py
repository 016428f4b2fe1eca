# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (MARKETPLACE PARTICIPANTS)
# =========================================================
ROLE_ADMIN = "admin"
ROLE_CREATOR = "creator"
ROLE_RETAILER = "retailer"
ROLE_COURIER = "courier"
ROLE_CONSUMER = "consumer"

ROLE_CHOICES = [
    (ROLE_ADMIN, "Admin"),
    (ROLE_CREATOR, "Creator"),
    (ROLE_RETAILER, "Retailer"),
    (ROLE_COURIER, "Courier"),
    (ROLE_CONSUMER, "Consumer"),
]

# Roles a visitor may pick at registration. Admins are created by admins.
SELF_SERVE_ROLES = {
    ROLE_CREATOR,
    ROLE_RETAILER,
    ROLE_COURIER,
    ROLE_CONSUMER,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_ASSETS_MANAGE = "assets.manage"

CAP_BIDS_CREATE = "bids.create"
CAP_BIDS_REVIEW = "bids.review"
CAP_BIDS_ACCEPT = "bids.accept"

CAP_CARDS_ISSUE = "cards.issue"
CAP_CARDS_ACTIVATE = "cards.activate"
CAP_CARDS_REDEEM = "cards.redeem"

CAP_KEYS_GENERATE = "keys.generate"

CAP_DELIVERIES_SEND = "deliveries.send"
CAP_DELIVERIES_ASSIGN = "deliveries.assign"
CAP_DELIVERIES_COURIER = "deliveries.courier"

CAP_EARNINGS_VIEW = "earnings.view"
CAP_WITHDRAWALS_REVIEW = "withdrawals.review"

CAP_ORDERS_CREATE = "orders.create"
CAP_ORDERS_SETTLE = "orders.settle"

ALL_CAPABILITIES = {
    CAP_ASSETS_MANAGE,
    CAP_BIDS_CREATE,
    CAP_BIDS_REVIEW,
    CAP_BIDS_ACCEPT,
    CAP_CARDS_ISSUE,
    CAP_CARDS_ACTIVATE,
    CAP_CARDS_REDEEM,
    CAP_KEYS_GENERATE,
    CAP_DELIVERIES_SEND,
    CAP_DELIVERIES_ASSIGN,
    CAP_DELIVERIES_COURIER,
    CAP_EARNINGS_VIEW,
    CAP_WITHDRAWALS_REVIEW,
    CAP_ORDERS_CREATE,
    CAP_ORDERS_SETTLE,
}


# =========================================================
# ROLE → CAPABILITY MAP (DEFAULT)
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_CREATOR: {
        CAP_ASSETS_MANAGE,
        CAP_BIDS_CREATE,
        CAP_CARDS_REDEEM,
        CAP_DELIVERIES_SEND,
        CAP_EARNINGS_VIEW,
        CAP_ORDERS_CREATE,
    },
    ROLE_RETAILER: {
        CAP_BIDS_ACCEPT,
        CAP_CARDS_ACTIVATE,
        CAP_CARDS_REDEEM,
        CAP_EARNINGS_VIEW,
        CAP_ORDERS_CREATE,
    },
    ROLE_COURIER: {
        CAP_DELIVERIES_COURIER,
    },
    ROLE_CONSUMER: {
        CAP_CARDS_REDEEM,
        CAP_DELIVERIES_SEND,
        CAP_EARNINGS_VIEW,
        CAP_ORDERS_CREATE,
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def capabilities_for(user) -> set[str]:
    if getattr(user, "is_superuser", False):
        return set(ALL_CAPABILITIES)
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


def user_has_capability(user, capability: str) -> bool:
    if not user or not getattr(user, "is_authenticated", False):
        return False
    return capability in capabilities_for(user)


def is_admin(user) -> bool:
    if not user or not getattr(user, "is_authenticated", False):
        return False
    return get_user_role(user) == ROLE_ADMIN or bool(getattr(user, "is_superuser", False))


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        required_capability = CAP_CARDS_REDEEM
    """

    def has_permission(self, request, view):
        required = getattr(view, "required_capability", None)
        if not required:
            # Deny-by-default to avoid accidental open endpoints.
            return False

        return user_has_capability(request.user, required)


class HasAnyCapability(BasePermission):
    """
    Require ANY capability from a set.

    Usage:
        required_any_capabilities = {CAP_BIDS_ACCEPT, CAP_BIDS_REVIEW}
    """

    def has_permission(self, request, view):
        required = getattr(view, "required_any_capabilities", None)
        if not required:
            return False

        user = request.user
        if not user or not user.is_authenticated:
            return False

        caps = capabilities_for(user)
        return any(cap in caps for cap in set(required))
