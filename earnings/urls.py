# earnings/urls.py

from django.urls import path

from earnings.views import (
    EarningsSummaryView,
    ReferralListView,
    WithdrawalListCreateView,
    WithdrawalReviewView,
)

app_name = "earnings"

urlpatterns = [
    path("summary/", EarningsSummaryView.as_view(), name="summary"),
    path("referrals/", ReferralListView.as_view(), name="referral-list"),
    path("withdrawals/", WithdrawalListCreateView.as_view(), name="withdrawal-list"),
    path("withdrawals/<uuid:pk>/review/", WithdrawalReviewView.as_view(), name="withdrawal-review"),
]
