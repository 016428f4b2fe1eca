# catalog/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from catalog.views import AssetViewSet, MarketplaceAssetDetailView, MarketplaceAssetListView

router = DefaultRouter()
router.register(r"assets", AssetViewSet, basename="assets")

urlpatterns = [
    path("marketplace/", MarketplaceAssetListView.as_view(), name="marketplace-list"),
    path("marketplace/<uuid:pk>/", MarketplaceAssetDetailView.as_view(), name="marketplace-detail"),
    path("", include(router.urls)),
]
