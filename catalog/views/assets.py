# catalog/views/assets.py

"""
CREATOR ASSET API

- /api/catalog/assets/                      list/create (own assets; admins see all)
- /api/catalog/assets/<id>/                 retrieve/update/delete
- POST /api/catalog/assets/<id>/publish/    toggle published
- POST /api/catalog/assets/<id>/display-id/ bind a display ID from the pool
"""

from __future__ import annotations

from django.db.models import ProtectedError
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from catalog.models import DigitalAsset
from catalog.serializers import DigitalAssetSerializer
from catalog.services.assets import assign_display_id, toggle_publish
from catalog.services.exceptions import AssetPermissionError
from keybank.services.exceptions import DisplayIdPoolExhausted
from permissions.roles import CAP_ASSETS_MANAGE, HasCapability, is_admin


class AssetViewSet(viewsets.ModelViewSet):
    serializer_class = DigitalAssetSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ASSETS_MANAGE

    def get_queryset(self):
        qs = DigitalAsset.objects.select_related("creator", "display_id")
        if not is_admin(self.request.user):
            qs = qs.filter(creator=self.request.user)

        params = self.request.query_params
        asset_type = (params.get("type") or "").strip()
        if asset_type:
            qs = qs.filter(type=asset_type)

        q = (params.get("q") or "").strip()
        if q:
            qs = qs.filter(title__icontains=q)

        return qs.order_by("-created_at")

    def perform_create(self, serializer):
        serializer.save(creator=self.request.user)

    def destroy(self, request, *args, **kwargs):
        asset = self.get_object()
        try:
            asset.delete()
        except ProtectedError:
            return Response(
                {"detail": "Asset has cards, bids or orders and cannot be deleted. Unpublish it instead."},
                status=status.HTTP_409_CONFLICT,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: DigitalAssetSerializer})
    @action(detail=True, methods=["post"], url_path="publish")
    def publish(self, request, pk=None):
        asset = self.get_object()
        try:
            asset = toggle_publish(asset=asset, user=request.user)
        except AssetPermissionError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_403_FORBIDDEN)
        return Response(DigitalAssetSerializer(asset).data)

    @extend_schema(request=None, responses={200: DigitalAssetSerializer})
    @action(detail=True, methods=["post"], url_path="display-id")
    def display_id(self, request, pk=None):
        asset = self.get_object()
        try:
            asset = assign_display_id(asset=asset, user=request.user)
        except AssetPermissionError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_403_FORBIDDEN)
        except DisplayIdPoolExhausted as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(DigitalAssetSerializer(asset).data)
