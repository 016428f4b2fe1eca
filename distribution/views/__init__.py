from .assignments import (
    AssignmentCancelView,
    AssignmentCompleteView,
    AssignmentListView,
)
from .bids import (
    BidAcceptView,
    BidAllocateView,
    BidCancelView,
    BidDetailView,
    BidListCreateView,
    BidReviewView,
)

__all__ = [
    "BidListCreateView",
    "BidDetailView",
    "BidReviewView",
    "BidAcceptView",
    "BidAllocateView",
    "BidCancelView",
    "AssignmentListView",
    "AssignmentCancelView",
    "AssignmentCompleteView",
]
