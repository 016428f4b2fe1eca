# distribution/urls.py

from django.urls import path

from distribution.views import (
    AssignmentCancelView,
    AssignmentCompleteView,
    AssignmentListView,
    BidAcceptView,
    BidAllocateView,
    BidCancelView,
    BidDetailView,
    BidListCreateView,
    BidReviewView,
)

app_name = "distribution"

urlpatterns = [
    path("bids/", BidListCreateView.as_view(), name="bid-list"),
    path("bids/<uuid:pk>/", BidDetailView.as_view(), name="bid-detail"),
    path("bids/<uuid:pk>/review/", BidReviewView.as_view(), name="bid-review"),
    path("bids/<uuid:pk>/accept/", BidAcceptView.as_view(), name="bid-accept"),
    path("bids/<uuid:pk>/allocate/", BidAllocateView.as_view(), name="bid-allocate"),
    path("bids/<uuid:pk>/cancel/", BidCancelView.as_view(), name="bid-cancel"),
    path("assignments/", AssignmentListView.as_view(), name="assignment-list"),
    path("assignments/<uuid:pk>/cancel/", AssignmentCancelView.as_view(), name="assignment-cancel"),
    path("assignments/<uuid:pk>/complete/", AssignmentCompleteView.as_view(), name="assignment-complete"),
]
