from .orders import (
    AssetOrderCreateView,
    KeyOrderCreateView,
    KeyQuoteView,
    OrderCancelView,
    OrderDetailView,
    OrderListView,
    OrderSettleView,
)

__all__ = [
    "OrderListView",
    "OrderDetailView",
    "AssetOrderCreateView",
    "KeyOrderCreateView",
    "KeyQuoteView",
    "OrderSettleView",
    "OrderCancelView",
]
