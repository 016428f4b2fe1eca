# keybank/views/pool.py

"""
KEY MANAGEMENT API (ADMIN)

- POST /api/keybank/display-ids/generate/   -> codes
- GET  /api/keybank/display-ids/?claimed=true|false
- POST /api/keybank/keys/generate/          -> key pairs (private halves shown once)
- GET  /api/keybank/keys/?claimed=true|false
- GET  /api/keybank/keys/mine/              -> keys owned by / assigned to caller
"""

from __future__ import annotations

from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from keybank.models import DisplayId, EncryptionKey
from keybank.serializers import (
    DisplayIdSerializer,
    EncryptionKeySerializer,
    GenerateDisplayIdsInputSerializer,
    GenerateKeysInputSerializer,
    GeneratedKeyPairSerializer,
)
from keybank.services.exceptions import GenerationError
from keybank.services.generation import generate_display_ids, generate_key_pairs
from permissions.roles import CAP_KEYS_GENERATE, HasCapability


def _parse_bool(raw: str | None):
    s = (raw or "").strip().lower()
    if s in {"1", "true", "yes"}:
        return True
    if s in {"0", "false", "no"}:
        return False
    return None


class DisplayIdListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_KEYS_GENERATE
    serializer_class = DisplayIdSerializer

    def get_queryset(self):
        qs = DisplayId.objects.all().order_by("-created_at", "code")
        claimed = _parse_bool(self.request.query_params.get("claimed"))
        if claimed is not None:
            qs = qs.filter(claimed=claimed)
        return qs


class DisplayIdGenerateView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_KEYS_GENERATE

    @extend_schema(
        request=GenerateDisplayIdsInputSerializer,
        responses={201: {"type": "object", "properties": {"codes": {"type": "array"}}}},
        description="Generate a batch of display IDs into the pool.",
    )
    def post(self, request):
        s = GenerateDisplayIdsInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            codes = generate_display_ids(
                quantity=s.validated_data["quantity"],
                prefix=s.validated_data.get("prefix") or None,
            )
        except GenerationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({"codes": codes}, status=status.HTTP_201_CREATED)


class EncryptionKeyListView(generics.ListAPIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_KEYS_GENERATE
    serializer_class = EncryptionKeySerializer

    def get_queryset(self):
        qs = EncryptionKey.objects.all().order_by("-created_at")
        claimed = _parse_bool(self.request.query_params.get("claimed"))
        if claimed is not None:
            qs = qs.filter(claimed=claimed)
        return qs


class EncryptionKeyGenerateView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_KEYS_GENERATE

    @extend_schema(
        request=GenerateKeysInputSerializer,
        responses={201: GeneratedKeyPairSerializer(many=True)},
        description="Generate key pairs. Private keys are returned once and never stored.",
    )
    def post(self, request):
        s = GenerateKeysInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            pairs = generate_key_pairs(
                quantity=s.validated_data["quantity"],
                base_price=s.validated_data.get("base_price"),
            )
        except GenerationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            GeneratedKeyPairSerializer(pairs, many=True).data,
            status=status.HTTP_201_CREATED,
        )


class MyKeysView(generics.ListAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = EncryptionKeySerializer

    def get_queryset(self):
        user = self.request.user
        return EncryptionKey.objects.filter(Q(owner=user) | Q(assigned_to=user)).order_by("-created_at")
