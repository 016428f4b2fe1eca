# deliveries/urls.py

from django.urls import path

from deliveries.views import (
    CourierAssignmentCancelView,
    CourierAssignmentListView,
    DeliveryAdvanceView,
    DeliveryAssignView,
    DeliveryListCreateView,
)

app_name = "deliveries"

urlpatterns = [
    path("", DeliveryListCreateView.as_view(), name="delivery-list"),
    path("<uuid:pk>/assign/", DeliveryAssignView.as_view(), name="delivery-assign"),
    path("<uuid:pk>/advance/", DeliveryAdvanceView.as_view(), name="delivery-advance"),
    path("assignments/", CourierAssignmentListView.as_view(), name="courier-assignment-list"),
    path(
        "assignments/<uuid:pk>/cancel/",
        CourierAssignmentCancelView.as_view(),
        name="courier-assignment-cancel",
    ),
]
