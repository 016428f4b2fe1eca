# deliveries/views/deliveries.py

"""
DELIVERIES API

- GET  /api/deliveries/                  admin: all, courier: assigned to them, others: sent by them
- POST /api/deliveries/                  { asset, recipient_pubkey, label }
- POST /api/deliveries/<id>/assign/      admin { courier }
- POST /api/deliveries/<id>/advance/     assigned courier
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
from deliveries.models import Delivery
from deliveries.serializers import (
    AssignCourierSerializer,
    CourierAssignmentSerializer,
    DeliveryCreateSerializer,
    DeliverySerializer,
)
from deliveries.services.deliveries import advance_delivery, assign_courier, create_delivery
from deliveries.services.exceptions import DeliveryError
from deliveries.views.errors import delivery_error_response
from permissions.roles import (
    CAP_DELIVERIES_ASSIGN,
    CAP_DELIVERIES_COURIER,
    CAP_DELIVERIES_SEND,
    HasCapability,
    ROLE_COURIER,
    get_user_role,
    is_admin,
)

User = get_user_model()


def visible_deliveries(user):
    qs = Delivery.objects.select_related("asset")
    if is_admin(user):
        return qs
    if get_user_role(user) == ROLE_COURIER:
        return qs.filter(courier_assignments__courier=user).distinct()
    return qs.filter(sender=user)


class DeliveryListCreateView(generics.ListAPIView):
    serializer_class = DeliverySerializer
    required_capability = CAP_DELIVERIES_SEND

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated(), HasCapability()]
        return [IsAuthenticated()]

    def get_queryset(self):
        qs = visible_deliveries(self.request.user)
        status_param = (self.request.query_params.get("status") or "").strip()
        if status_param:
            qs = qs.filter(status=status_param)
        return qs.order_by("-created_at")

    @extend_schema(request=DeliveryCreateSerializer, responses={201: DeliverySerializer})
    def post(self, request):
        s = DeliveryCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        asset = get_object_or_404(DigitalAsset, pk=data["asset"])
        try:
            delivery = create_delivery(
                sender=request.user,
                asset=asset,
                recipient_pubkey=data["recipient_pubkey"],
                label=data["label"],
            )
        except DeliveryError as exc:
            return delivery_error_response(exc)
        return Response(DeliverySerializer(delivery).data, status=status.HTTP_201_CREATED)


class DeliveryAssignView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_DELIVERIES_ASSIGN

    @extend_schema(request=AssignCourierSerializer, responses={201: CourierAssignmentSerializer})
    def post(self, request, pk):
        s = AssignCourierSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        delivery = get_object_or_404(Delivery, pk=pk)
        courier = get_object_or_404(User, pk=s.validated_data["courier"])
        try:
            assignment = assign_courier(delivery=delivery, courier=courier, assigner=request.user)
        except DeliveryError as exc:
            return delivery_error_response(exc)
        return Response(CourierAssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)


class DeliveryAdvanceView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_DELIVERIES_COURIER

    @extend_schema(request=None, responses={200: DeliverySerializer})
    def post(self, request, pk):
        delivery = get_object_or_404(Delivery, pk=pk)
        try:
            delivery = advance_delivery(delivery=delivery, courier=request.user)
        except DeliveryError as exc:
            return delivery_error_response(exc)
        return Response(DeliverySerializer(delivery).data)
