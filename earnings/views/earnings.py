# earnings/views/earnings.py

"""
EARNINGS SUMMARY

One read endpoint with every figure the earnings panels need.
Money values are serialised as strings.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from earnings.models import Referral
from earnings.serializers import EarningsSummarySerializer, ReferralSerializer
from earnings.services.calculators import (
    available_balance,
    creator_earnings,
    referral_earnings,
    reserved_withdrawals,
    retailer_earnings,
)
from permissions.roles import CAP_EARNINGS_VIEW, HasCapability


class EarningsSummaryView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_EARNINGS_VIEW

    @extend_schema(responses={200: EarningsSummarySerializer})
    def get(self, request):
        user = request.user

        creator = creator_earnings(user)
        retailer = retailer_earnings(user)
        referrals = referral_earnings(user)
        total = creator.total + retailer.total + referrals.total

        return Response(
            {
                "referral_code": user.referral_code,
                "creator": {
                    "redemptions": creator.redemptions,
                    "redemptions_this_month": creator.redemptions_this_month,
                    "total": str(creator.total),
                    "this_month": str(creator.this_month),
                },
                "retailer": {
                    "profit_share": str(retailer.profit_share),
                    "flat_fee": str(retailer.flat_fee),
                    "total": str(retailer.total),
                },
                "referrals": {
                    "count": referrals.count,
                    "total": str(referrals.total),
                },
                "total_earnings": str(total),
                "reserved_withdrawals": str(reserved_withdrawals(user)),
                "available_balance": str(available_balance(user)),
            }
        )


class ReferralListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ReferralSerializer

    def get_queryset(self):
        return Referral.objects.filter(referrer=self.request.user).select_related("referred").order_by("-created_at")
