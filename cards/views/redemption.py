# cards/views/redemption.py

"""
REDEMPTION API

POST /api/cards/redeem/
    { serial_code, display_id, public_key }
    201 -> new redemption
    200 -> replay of the caller's own earlier redemption (replayed=true)
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from cards.models import AssetAccessLog, Redemption
from cards.serializers import AssetAccessLogSerializer, RedeemInputSerializer, RedemptionSerializer
from cards.services.exceptions import (
    AlreadyClaimedError,
    AlreadyRedeemedError,
    CardNotActiveError,
    CredentialMismatchError,
    InvalidDisplayIdError,
    InvalidPublicKeyError,
    InvalidSerialError,
    RedemptionConflictError,
    RedemptionError,
)
from cards.services.redemption import redeem_card
from permissions.roles import CAP_CARDS_REDEEM, HasCapability

logger = logging.getLogger(__name__)

_NOT_FOUND = (InvalidSerialError, InvalidDisplayIdError, InvalidPublicKeyError)
_CONFLICT = (AlreadyRedeemedError, AlreadyClaimedError, CardNotActiveError, RedemptionConflictError)


class RedeemCardView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_CARDS_REDEEM
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "redeem"

    @extend_schema(
        request=RedeemInputSerializer,
        responses={200: RedemptionSerializer, 201: RedemptionSerializer},
        description="Redeem a Command Card with its display ID and public key.",
    )
    def post(self, request):
        s = RedeemInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            result = redeem_card(
                user=request.user,
                serial_code=data["serial_code"],
                display_id=data["display_id"],
                public_key=data["public_key"],
            )
        except _NOT_FOUND as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        except CredentialMismatchError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except _CONFLICT as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        except RedemptionError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        payload = dict(RedemptionSerializer(result.redemption).data)
        payload["replayed"] = result.replayed
        return Response(
            payload,
            status=status.HTTP_200_OK if result.replayed else status.HTTP_201_CREATED,
        )


class MyRedemptionsView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = RedemptionSerializer

    def get_queryset(self):
        return (
            Redemption.objects.filter(user=self.request.user)
            .select_related("card", "asset", "display_id", "encryption_key")
            .order_by("-created_at")
        )


class MyAccessView(generics.ListAPIView):
    """
    Every asset the caller can access, however access was granted.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = AssetAccessLogSerializer

    def get_queryset(self):
        return (
            AssetAccessLog.objects.filter(user=self.request.user)
            .select_related("asset")
            .order_by("-created_at")
        )
