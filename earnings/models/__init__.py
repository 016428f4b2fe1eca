# earnings/models/__init__.py

from .referral import Referral
from .withdrawal import WithdrawalRequest

__all__ = ["Referral", "WithdrawalRequest"]
