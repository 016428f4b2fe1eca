# cards/urls.py

from django.urls import path

from cards.views import (
    ActivateCardsView,
    CardListView,
    IssueCardsView,
    MyAccessView,
    MyRedemptionsView,
    RedeemCardView,
    VoidCardView,
)

app_name = "cards"

urlpatterns = [
    path("", CardListView.as_view(), name="card-list"),
    path("issue/", IssueCardsView.as_view(), name="card-issue"),
    path("activate/", ActivateCardsView.as_view(), name="card-activate"),
    path("redeem/", RedeemCardView.as_view(), name="card-redeem"),
    path("redemptions/mine/", MyRedemptionsView.as_view(), name="my-redemptions"),
    path("access/mine/", MyAccessView.as_view(), name="my-access"),
    path("<uuid:pk>/void/", VoidCardView.as_view(), name="card-void"),
]
