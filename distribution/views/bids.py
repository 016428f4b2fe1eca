# distribution/views/bids.py

"""
DISTRIBUTION BIDS API

Visibility:
- admin:    every bid
- creator:  own bids
- retailer: open bids (the marketplace of distribution offers)
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from catalog.models import DigitalAsset
from distribution.models import DistributionBid
from distribution.serializers import (
    BidAcceptSerializer,
    BidAllocateSerializer,
    BidCreateSerializer,
    BidReviewSerializer,
    DistributionAssignmentSerializer,
    DistributionBidSerializer,
)
from distribution.services.allocation import allocate
from distribution.services.bids import cancel_bid, create_bid, review_bid
from distribution.services.exceptions import DistributionError
from distribution.views.errors import distribution_error_response
from permissions.roles import (
    CAP_BIDS_ACCEPT,
    CAP_BIDS_CREATE,
    CAP_BIDS_REVIEW,
    HasCapability,
    ROLE_RETAILER,
    get_user_role,
    is_admin,
)

User = get_user_model()


def visible_bids(user):
    qs = DistributionBid.objects.select_related("asset", "creator")
    if is_admin(user):
        return qs
    if get_user_role(user) == ROLE_RETAILER:
        return qs.filter(status=DistributionBid.STATUS_OPEN)
    return qs.filter(creator=user)


class BidListCreateView(generics.ListAPIView):
    serializer_class = DistributionBidSerializer
    required_capability = CAP_BIDS_CREATE

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated(), HasCapability()]
        return [IsAuthenticated()]

    def get_queryset(self):
        qs = visible_bids(self.request.user)
        status_param = (self.request.query_params.get("status") or "").strip()
        if status_param:
            qs = qs.filter(status=status_param)
        return qs.order_by("-created_at")

    @extend_schema(request=BidCreateSerializer, responses={201: DistributionBidSerializer})
    def post(self, request):
        s = BidCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        asset = get_object_or_404(DigitalAsset, pk=data["asset"])
        try:
            bid = create_bid(
                creator=request.user,
                asset=asset,
                quantity=data["quantity"],
                region=data.get("region", ""),
                bid_type=data["bid_type"],
                profit_percent=data.get("profit_percent"),
                flat_fee=data.get("flat_fee"),
            )
        except DistributionError as exc:
            return distribution_error_response(exc)

        return Response(DistributionBidSerializer(bid).data, status=status.HTTP_201_CREATED)


class BidDetailView(generics.RetrieveAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = DistributionBidSerializer

    def get_queryset(self):
        return visible_bids(self.request.user)


class BidReviewView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_BIDS_REVIEW

    @extend_schema(request=BidReviewSerializer, responses={200: DistributionBidSerializer})
    def post(self, request, pk):
        s = BidReviewSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        bid = get_object_or_404(DistributionBid, pk=pk)
        try:
            bid = review_bid(bid=bid, reviewer=request.user, approve=s.validated_data["approve"])
        except DistributionError as exc:
            return distribution_error_response(exc)
        return Response(DistributionBidSerializer(bid).data)


class BidAcceptView(APIView):
    """
    Retailer reserves (part of) an open bid for themselves.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_BIDS_ACCEPT

    @extend_schema(request=BidAcceptSerializer, responses={201: DistributionAssignmentSerializer})
    def post(self, request, pk):
        s = BidAcceptSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        bid = get_object_or_404(DistributionBid, pk=pk)
        try:
            assignment = allocate(bid=bid, retailer=request.user, quantity=s.validated_data.get("quantity"))
        except DistributionError as exc:
            return distribution_error_response(exc)

        return Response(DistributionAssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)


class BidAllocateView(APIView):
    """
    Admin allocates (part of) an open bid to a named retailer.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_BIDS_REVIEW

    @extend_schema(request=BidAllocateSerializer, responses={201: DistributionAssignmentSerializer})
    def post(self, request, pk):
        s = BidAllocateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        bid = get_object_or_404(DistributionBid, pk=pk)
        retailer = get_object_or_404(User, pk=s.validated_data["retailer"])
        try:
            assignment = allocate(bid=bid, retailer=retailer, quantity=s.validated_data.get("quantity"))
        except DistributionError as exc:
            return distribution_error_response(exc)

        return Response(DistributionAssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)


class BidCancelView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_BIDS_CREATE

    @extend_schema(request=None, responses={200: DistributionBidSerializer})
    def post(self, request, pk):
        bid = get_object_or_404(DistributionBid, pk=pk)
        try:
            bid = cancel_bid(bid=bid, user=request.user)
        except DistributionError as exc:
            return distribution_error_response(exc)
        return Response(DistributionBidSerializer(bid).data)
