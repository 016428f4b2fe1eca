from unittest import mock

from django.db.models.query import QuerySet
from django.test import TestCase
from rest_framework.test import APIClient

from cards.tests.builders import make_asset, make_user, open_bid
from distribution.models import DistributionAssignment, DistributionBid
from distribution.services.allocation import (
    allocate,
    cancel_assignment,
    complete_assignment,
)
from distribution.services.bids import cancel_bid, create_bid, review_bid
from distribution.services.exceptions import (
    AssignmentStateError,
    BidPermissionError,
    BidStateError,
    BidValidationError,
    DuplicateAssignmentError,
    OverAllocationError,
)


class BidLifecycleTests(TestCase):
    def setUp(self):
        self.admin = make_user("admin", "admin@example.com")
        self.creator = make_user("creator", "creator@example.com")
        self.other_creator = make_user("creator", "other@example.com")
        self.asset = make_asset(self.creator)

    def test_create_bid_requires_owner_and_published_asset(self):
        with self.assertRaises(BidPermissionError):
            create_bid(
                creator=self.other_creator,
                asset=self.asset,
                quantity=5,
                bid_type=DistributionBid.TYPE_FLAT_FEE,
                flat_fee="50.00",
            )

        draft = make_asset(self.creator, title="Draft", published=False)
        with self.assertRaises(BidValidationError):
            create_bid(
                creator=self.creator,
                asset=draft,
                quantity=5,
                bid_type=DistributionBid.TYPE_FLAT_FEE,
                flat_fee="50.00",
            )

    def test_terms_are_validated_per_bid_type(self):
        with self.assertRaises(BidValidationError):
            create_bid(
                creator=self.creator,
                asset=self.asset,
                quantity=5,
                bid_type=DistributionBid.TYPE_PROFIT_SHARE,
            )
        with self.assertRaises(BidValidationError):
            create_bid(
                creator=self.creator,
                asset=self.asset,
                quantity=5,
                bid_type=DistributionBid.TYPE_PROFIT_SHARE,
                profit_percent="150",
            )
        with self.assertRaises(BidValidationError):
            create_bid(
                creator=self.creator,
                asset=self.asset,
                quantity=0,
                bid_type=DistributionBid.TYPE_FLAT_FEE,
                flat_fee="10.00",
            )

    def test_review_moves_pending_bid(self):
        bid = create_bid(
            creator=self.creator,
            asset=self.asset,
            quantity=5,
            bid_type=DistributionBid.TYPE_PROFIT_SHARE,
            profit_percent="12.5",
        )
        self.assertEqual(bid.status, DistributionBid.STATUS_PENDING)

        with self.assertRaises(BidPermissionError):
            review_bid(bid=bid, reviewer=self.creator, approve=True)

        bid = review_bid(bid=bid, reviewer=self.admin, approve=True)
        self.assertEqual(bid.status, DistributionBid.STATUS_OPEN)

        with self.assertRaises(BidStateError):
            review_bid(bid=bid, reviewer=self.admin, approve=False)

    def test_rejected_bid_is_cancelled(self):
        bid = create_bid(
            creator=self.creator,
            asset=self.asset,
            quantity=5,
            bid_type=DistributionBid.TYPE_FLAT_FEE,
            flat_fee="25.00",
        )
        bid = review_bid(bid=bid, reviewer=self.admin, approve=False)
        self.assertEqual(bid.status, DistributionBid.STATUS_CANCELLED)


class AllocatorTests(TestCase):
    """
    GUARANTEES:
    - sum(live assignment quantities) == quantity_reserved <= quantity
    - one live assignment per retailer per bid
    - fully reserved bids become accepted; releasing capacity re-opens them
    """

    def setUp(self):
        self.admin = make_user("admin", "admin@example.com")
        self.creator = make_user("creator", "creator@example.com")
        self.retailer_a = make_user("retailer", "a@example.com")
        self.retailer_b = make_user("retailer", "b@example.com")
        self.consumer = make_user("consumer", "consumer@example.com")
        asset = make_asset(self.creator)
        self.bid = open_bid(creator=self.creator, asset=asset, admin=self.admin, quantity=10)

    def _reserved(self):
        self.bid.refresh_from_db()
        return self.bid.quantity_reserved

    def test_partial_allocations_accumulate(self):
        allocate(bid=self.bid, retailer=self.retailer_a, quantity=4)
        allocate(bid=self.bid, retailer=self.retailer_b, quantity=6)

        self.assertEqual(self._reserved(), 10)
        self.assertEqual(self.bid.status, DistributionBid.STATUS_ACCEPTED)

        live = DistributionAssignment.objects.filter(bid=self.bid).exclude(
            status=DistributionAssignment.STATUS_CANCELLED
        )
        self.assertEqual(sum(a.quantity for a in live), self.bid.quantity_reserved)

    def test_default_quantity_takes_remaining(self):
        allocate(bid=self.bid, retailer=self.retailer_a, quantity=3)
        assignment = allocate(bid=self.bid, retailer=self.retailer_b)

        self.assertEqual(assignment.quantity, 7)
        self.assertEqual(self._reserved(), 10)

    def test_over_allocation_is_rejected(self):
        allocate(bid=self.bid, retailer=self.retailer_a, quantity=8)

        with self.assertRaises(OverAllocationError):
            allocate(bid=self.bid, retailer=self.retailer_b, quantity=3)
        with self.assertRaises(OverAllocationError):
            allocate(bid=self.bid, retailer=self.retailer_b, quantity=0)

        self.assertEqual(self._reserved(), 8)

    def test_duplicate_live_assignment_is_rejected(self):
        allocate(bid=self.bid, retailer=self.retailer_a, quantity=2)

        with self.assertRaises(DuplicateAssignmentError):
            allocate(bid=self.bid, retailer=self.retailer_a, quantity=2)
        self.assertEqual(self._reserved(), 2)

    def test_only_retailers_and_open_bids(self):
        with self.assertRaises(BidPermissionError):
            allocate(bid=self.bid, retailer=self.consumer, quantity=1)

        allocate(bid=self.bid, retailer=self.retailer_a)
        with self.assertRaises(BidStateError):
            allocate(bid=self.bid, retailer=self.retailer_b, quantity=1)

    def test_lost_capacity_update_writes_nothing(self):
        real_update = QuerySet.update

        def capacity_taken(qs, **kwargs):
            if qs.model is DistributionBid:
                return 0
            return real_update(qs, **kwargs)

        with mock.patch.object(QuerySet, "update", autospec=True, side_effect=capacity_taken):
            with self.assertRaises(OverAllocationError):
                allocate(bid=self.bid, retailer=self.retailer_a, quantity=4)

        self.assertEqual(self._reserved(), 0)
        self.assertEqual(self.bid.status, DistributionBid.STATUS_OPEN)
        self.assertFalse(DistributionAssignment.objects.filter(bid=self.bid).exists())

    def test_cancel_assignment_releases_and_reopens(self):
        assignment = allocate(bid=self.bid, retailer=self.retailer_a)
        self.assertEqual(self._reserved(), 10)

        cancel_assignment(assignment=assignment, user=self.retailer_a)

        self.assertEqual(self._reserved(), 0)
        self.assertEqual(self.bid.status, DistributionBid.STATUS_OPEN)

        again = allocate(bid=self.bid, retailer=self.retailer_a, quantity=5)
        self.assertEqual(again.status, DistributionAssignment.STATUS_PENDING)

    def test_cancel_assignment_permissions_and_state(self):
        assignment = allocate(bid=self.bid, retailer=self.retailer_a, quantity=5)

        with self.assertRaises(BidPermissionError):
            cancel_assignment(assignment=assignment, user=self.retailer_b)

        cancel_assignment(assignment=assignment, user=self.admin)
        with self.assertRaises(AssignmentStateError):
            cancel_assignment(assignment=assignment, user=self.admin)

    def test_cancel_bid_only_when_nothing_reserved(self):
        allocate(bid=self.bid, retailer=self.retailer_a, quantity=1)

        with self.assertRaises(BidStateError):
            cancel_bid(bid=self.bid, user=self.creator)

    def test_cancel_bid(self):
        bid = cancel_bid(bid=self.bid, user=self.creator)
        self.assertEqual(bid.status, DistributionBid.STATUS_CANCELLED)

    def test_complete_requires_active_assignment(self):
        assignment = allocate(bid=self.bid, retailer=self.retailer_a, quantity=1)
        with self.assertRaises(AssignmentStateError):
            complete_assignment(assignment=assignment)


class DistributionApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin", "admin@example.com")
        self.creator = make_user("creator", "creator@example.com")
        self.retailer = make_user("retailer", "retailer@example.com")
        self.asset = make_asset(self.creator)

    def test_full_bid_flow(self):
        self.client.force_authenticate(self.creator)
        res = self.client.post(
            "/api/distribution/bids/",
            {
                "asset": str(self.asset.id),
                "quantity": 5,
                "bid_type": "profit_share",
                "profit_percent": "15.00",
                "region": "North",
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201)
        bid_id = res.data["id"]

        # Retailers only see open bids
        self.client.force_authenticate(self.retailer)
        res = self.client.get("/api/distribution/bids/")
        self.assertEqual(res.data["count"], 0)

        self.client.force_authenticate(self.admin)
        res = self.client.post(f"/api/distribution/bids/{bid_id}/review/", {"approve": True}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], "open")

        self.client.force_authenticate(self.retailer)
        res = self.client.get("/api/distribution/bids/")
        self.assertEqual(res.data["count"], 1)

        res = self.client.post(f"/api/distribution/bids/{bid_id}/accept/", {"quantity": 6}, format="json")
        self.assertEqual(res.status_code, 409)

        res = self.client.post(f"/api/distribution/bids/{bid_id}/accept/", {"quantity": 5}, format="json")
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["quantity"], 5)

        res = self.client.get("/api/distribution/assignments/")
        self.assertEqual(res.data["count"], 1)

    def test_retailer_cannot_create_or_review_bids(self):
        self.client.force_authenticate(self.retailer)
        res = self.client.post(
            "/api/distribution/bids/",
            {"asset": str(self.asset.id), "quantity": 5, "bid_type": "flat_fee", "flat_fee": "10.00"},
            format="json",
        )
        self.assertEqual(res.status_code, 403)

    def test_admin_allocates_to_named_retailer(self):
        bid = open_bid(creator=self.creator, asset=self.asset, admin=self.admin, quantity=4)

        self.client.force_authenticate(self.admin)
        res = self.client.post(
            f"/api/distribution/bids/{bid.id}/allocate/",
            {"retailer": str(self.retailer.id), "quantity": 2},
            format="json",
        )
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["retailer"], self.retailer.id)
