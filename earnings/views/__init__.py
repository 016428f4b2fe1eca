from .earnings import EarningsSummaryView, ReferralListView
from .withdrawals import WithdrawalListCreateView, WithdrawalReviewView

__all__ = [
    "EarningsSummaryView",
    "ReferralListView",
    "WithdrawalListCreateView",
    "WithdrawalReviewView",
]
