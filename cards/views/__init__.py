from .cards import ActivateCardsView, CardListView, IssueCardsView, VoidCardView
from .redemption import MyAccessView, MyRedemptionsView, RedeemCardView

__all__ = [
    "CardListView",
    "IssueCardsView",
    "ActivateCardsView",
    "VoidCardView",
    "RedeemCardView",
    "MyRedemptionsView",
    "MyAccessView",
]
