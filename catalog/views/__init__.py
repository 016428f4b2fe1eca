from .assets import AssetViewSet
from .marketplace import MarketplaceAssetDetailView, MarketplaceAssetListView

__all__ = [
    "AssetViewSet",
    "MarketplaceAssetListView",
    "MarketplaceAssetDetailView",
]
