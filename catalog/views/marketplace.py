# catalog/views/marketplace.py

"""
PUBLIC MARKETPLACE (AllowAny)

Published assets only, read-only.
"""

from django.db.models import Q
from rest_framework import generics
from rest_framework.permissions import AllowAny

from catalog.models import DigitalAsset
from catalog.serializers import MarketplaceAssetSerializer


def _published_assets():
    return DigitalAsset.objects.filter(published=True).select_related("creator", "display_id")


class MarketplaceAssetListView(generics.ListAPIView):
    permission_classes = [AllowAny]
    serializer_class = MarketplaceAssetSerializer

    def get_queryset(self):
        qs = _published_assets()
        params = self.request.query_params

        asset_type = (params.get("type") or "").strip()
        if asset_type:
            qs = qs.filter(type=asset_type)

        q = (params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(title__icontains=q) | Q(description__icontains=q))

        return qs.order_by("-created_at")


class MarketplaceAssetDetailView(generics.RetrieveAPIView):
    permission_classes = [AllowAny]
    serializer_class = MarketplaceAssetSerializer

    def get_queryset(self):
        return _published_assets()
