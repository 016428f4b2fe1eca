# orders/views/orders.py

"""
ORDERS API

- GET  /api/orders/                     own orders (admin: all)
- GET  /api/orders/<id>/
- POST /api/orders/assets/              { asset }
- POST /api/orders/keys/                { quantity }
- GET  /api/orders/keys/quote/?quantity=N
- POST /api/orders/<id>/settle/         admin { paid }
- POST /api/orders/<id>/cancel/
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from catalog.models import DigitalAsset
from keybank.serializers import GeneratedKeyPairSerializer
from orders.models import Order
from orders.serializers import (
    AssetOrderInputSerializer,
    KeyOrderInputSerializer,
    KeyQuoteSerializer,
    OrderSerializer,
    SettleOrderInputSerializer,
)
from orders.services.exceptions import (
    OrderError,
    OrderPermissionError,
    OrderStateError,
    OrderValidationError,
)
from orders.services.orders import (
    cancel_order,
    create_asset_order,
    create_key_order,
    settle_order,
)
from orders.services.pricing import key_price
from permissions.roles import CAP_ORDERS_CREATE, CAP_ORDERS_SETTLE, HasCapability, is_admin


def _order_error(exc: OrderError) -> Response:
    if isinstance(exc, OrderPermissionError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, OrderStateError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({"detail": str(exc)}, status=code)


def visible_orders(user):
    qs = Order.objects.select_related("asset")
    if is_admin(user):
        return qs
    return qs.filter(user=user)


class OrderListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = OrderSerializer

    def get_queryset(self):
        qs = visible_orders(self.request.user)
        params = self.request.query_params
        payment_status = (params.get("payment_status") or "").strip()
        if payment_status:
            qs = qs.filter(payment_status=payment_status)
        kind = (params.get("kind") or "").strip()
        if kind:
            qs = qs.filter(kind=kind)
        return qs.order_by("-created_at")


class OrderDetailView(generics.RetrieveAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = OrderSerializer

    def get_queryset(self):
        return visible_orders(self.request.user)


class AssetOrderCreateView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_CREATE

    @extend_schema(request=AssetOrderInputSerializer, responses={201: OrderSerializer})
    def post(self, request):
        s = AssetOrderInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        asset = get_object_or_404(DigitalAsset, pk=s.validated_data["asset"], published=True)
        try:
            order = create_asset_order(user=request.user, asset=asset)
        except OrderError as exc:
            return _order_error(exc)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


class KeyOrderCreateView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_CREATE

    @extend_schema(request=KeyOrderInputSerializer, responses={201: OrderSerializer})
    def post(self, request):
        s = KeyOrderInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            order = create_key_order(user=request.user, quantity=s.validated_data["quantity"])
        except OrderError as exc:
            return _order_error(exc)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


class KeyQuoteView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[OpenApiParameter("quantity", int, required=True)],
        responses={200: KeyQuoteSerializer},
    )
    def get(self, request):
        try:
            quote = key_price(request.query_params.get("quantity"))
        except OrderValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(KeyQuoteSerializer(quote).data)


class OrderSettleView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_SETTLE

    @extend_schema(request=SettleOrderInputSerializer, responses={200: OrderSerializer})
    def post(self, request, pk):
        s = SettleOrderInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        order = get_object_or_404(Order, pk=pk)
        try:
            result = settle_order(order=order, settler=request.user, paid=s.validated_data["paid"])
        except OrderError as exc:
            return _order_error(exc)

        payload = dict(OrderSerializer(result.order).data)
        if result.key_pairs:
            # Private halves are never stored; this response is the only copy.
            payload["key_pairs"] = GeneratedKeyPairSerializer(result.key_pairs, many=True).data
        return Response(payload)


class OrderCancelView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: OrderSerializer})
    def post(self, request, pk):
        order = get_object_or_404(visible_orders(request.user), pk=pk)
        try:
            order = cancel_order(order=order, user=request.user)
        except OrderError as exc:
            return _order_error(exc)
        return Response(OrderSerializer(order).data)
