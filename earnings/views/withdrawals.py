# earnings/views/withdrawals.py

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from earnings.models import WithdrawalRequest
from earnings.serializers import (
    WithdrawalCreateSerializer,
    WithdrawalRequestSerializer,
    WithdrawalReviewSerializer,
)
from earnings.services.exceptions import (
    InsufficientBalanceError,
    WithdrawalError,
    WithdrawalPermissionError,
    WithdrawalStateError,
)
from earnings.services.withdrawals import request_withdrawal, review_withdrawal
from permissions.roles import CAP_EARNINGS_VIEW, CAP_WITHDRAWALS_REVIEW, HasCapability, is_admin


def _withdrawal_error(exc: WithdrawalError) -> Response:
    if isinstance(exc, WithdrawalPermissionError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, (WithdrawalStateError, InsufficientBalanceError)):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({"detail": str(exc)}, status=code)


class WithdrawalListCreateView(generics.ListAPIView):
    """
    GET:  own requests (admin: all, ?status= filter)
    POST: request a withdrawal (amount optional, defaults to full balance)
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_EARNINGS_VIEW
    serializer_class = WithdrawalRequestSerializer

    def get_queryset(self):
        qs = WithdrawalRequest.objects.all()
        if not is_admin(self.request.user):
            qs = qs.filter(user=self.request.user)
        status_param = (self.request.query_params.get("status") or "").strip()
        if status_param:
            qs = qs.filter(status=status_param)
        return qs.order_by("-created_at")

    @extend_schema(request=WithdrawalCreateSerializer, responses={201: WithdrawalRequestSerializer})
    def post(self, request):
        s = WithdrawalCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            req = request_withdrawal(user=request.user, amount=s.validated_data.get("amount"))
        except WithdrawalError as exc:
            return _withdrawal_error(exc)
        return Response(WithdrawalRequestSerializer(req).data, status=status.HTTP_201_CREATED)


class WithdrawalReviewView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_WITHDRAWALS_REVIEW

    @extend_schema(request=WithdrawalReviewSerializer, responses={200: WithdrawalRequestSerializer})
    def post(self, request, pk):
        s = WithdrawalReviewSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        req = get_object_or_404(WithdrawalRequest, pk=pk)
        try:
            req = review_withdrawal(request=req, reviewer=request.user, approve=s.validated_data["approve"])
        except WithdrawalError as exc:
            return _withdrawal_error(exc)
        return Response(WithdrawalRequestSerializer(req).data)
