# orders/urls.py

from django.urls import path

from orders.views import (
    AssetOrderCreateView,
    KeyOrderCreateView,
    KeyQuoteView,
    OrderCancelView,
    OrderDetailView,
    OrderListView,
    OrderSettleView,
)

app_name = "orders"

urlpatterns = [
    path("", OrderListView.as_view(), name="order-list"),
    path("assets/", AssetOrderCreateView.as_view(), name="asset-order-create"),
    path("keys/", KeyOrderCreateView.as_view(), name="key-order-create"),
    path("keys/quote/", KeyQuoteView.as_view(), name="key-quote"),
    path("<uuid:pk>/", OrderDetailView.as_view(), name="order-detail"),
    path("<uuid:pk>/settle/", OrderSettleView.as_view(), name="order-settle"),
    path("<uuid:pk>/cancel/", OrderCancelView.as_view(), name="order-cancel"),
]
