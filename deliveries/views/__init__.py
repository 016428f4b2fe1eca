from .couriers import CourierAssignmentCancelView, CourierAssignmentListView
from .deliveries import DeliveryAdvanceView, DeliveryAssignView, DeliveryListCreateView

__all__ = [
    "DeliveryListCreateView",
    "DeliveryAssignView",
    "DeliveryAdvanceView",
    "CourierAssignmentListView",
    "CourierAssignmentCancelView",
]
