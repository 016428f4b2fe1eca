from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIClient

from cards.services.issuance import void_card
from cards.services.redemption import redeem_card
from cards.tests.builders import fill_pool, issued_cards, make_asset, make_user, open_bid
from distribution.models import DistributionAssignment, DistributionBid
from earnings.models import Referral, WithdrawalRequest
from earnings.services.calculators import (
    available_balance,
    creator_earnings,
    referral_earnings,
    retailer_earnings,
)
from earnings.services.exceptions import (
    InsufficientBalanceError,
    WithdrawalPermissionError,
    WithdrawalStateError,
)
from earnings.services.referrals import record_referral
from earnings.services.withdrawals import request_withdrawal, review_withdrawal


def redeem(card, user):
    return redeem_card(
        user=user,
        serial_code=card.serial_code,
        display_id=card.display_id.code,
        public_key=card.encryption_key.public_key,
    )


class ReferralTests(TestCase):
    def setUp(self):
        self.referrer = make_user("retailer", "shop@example.com")
        self.friend = make_user("consumer", "friend@example.com")

    def test_records_once(self):
        referral = record_referral(referrer_code=self.referrer.referral_code, referred=self.friend)
        self.assertIsNotNone(referral)

        again = record_referral(referrer_code=self.referrer.referral_code, referred=self.friend)
        self.assertIsNone(again)
        self.assertEqual(Referral.objects.count(), 1)

    def test_self_and_unknown_codes_are_ignored(self):
        self.assertIsNone(record_referral(referrer_code=self.friend.referral_code, referred=self.friend))
        self.assertIsNone(record_referral(referrer_code="ZZZZZZZZ", referred=self.friend))
        self.assertIsNone(record_referral(referrer_code="", referred=self.friend))
        self.assertFalse(Referral.objects.exists())

    def test_referral_earnings(self):
        record_referral(referrer_code=self.referrer.referral_code, referred=self.friend)
        other = make_user("creator", "other@example.com")
        record_referral(referrer_code=self.referrer.referral_code, referred=other)

        result = referral_earnings(self.referrer)
        self.assertEqual(result.count, 2)
        self.assertEqual(result.total, Decimal("10.00"))


class EarningsCalculatorTests(TestCase):
    """
    GUARANTEES:
    - creators earn a fixed payout per redemption of their assets
    - profit-share retailers earn price x percent per redeemed card
    - flat-fee retailers earn their share of the fee once an assignment completes
    """

    def setUp(self):
        self.admin = make_user("admin", "admin@example.com")
        self.creator = make_user("creator", "creator@example.com")
        self.retailer = make_user("retailer", "retailer@example.com")
        self.consumer = make_user("consumer", "consumer@example.com")
        self.asset = make_asset(self.creator, price="10.00")
        fill_pool(6)

    def test_creator_earns_per_redemption(self):
        bid = open_bid(creator=self.creator, asset=self.asset, admin=self.admin, quantity=2)
        _, cards = issued_cards(bid=bid, retailer=self.retailer, admin=self.admin)

        redeem(cards[0], self.consumer)
        redeem(cards[1], self.consumer)

        result = creator_earnings(self.creator)
        self.assertEqual(result.redemptions, 2)
        self.assertEqual(result.redemptions_this_month, 2)
        self.assertEqual(result.total, Decimal("10.00"))
        self.assertEqual(result.this_month, Decimal("10.00"))

    def test_profit_share_per_redeemed_card(self):
        bid = open_bid(
            creator=self.creator,
            asset=self.asset,
            admin=self.admin,
            quantity=3,
            profit_percent="20.00",
        )
        _, cards = issued_cards(bid=bid, retailer=self.retailer, admin=self.admin)

        self.assertEqual(retailer_earnings(self.retailer).total, Decimal("0.00"))

        redeem(cards[0], self.consumer)
        redeem(cards[1], self.consumer)

        result = retailer_earnings(self.retailer)
        self.assertEqual(result.profit_share, Decimal("4.00"))
        self.assertEqual(result.flat_fee, Decimal("0.00"))
        self.assertEqual(result.total, Decimal("4.00"))

    def test_flat_fee_is_pro_rata_on_completion(self):
        bid = open_bid(
            creator=self.creator,
            asset=self.asset,
            admin=self.admin,
            quantity=4,
            bid_type=DistributionBid.TYPE_FLAT_FEE,
            flat_fee="40.00",
        )
        assignment, cards = issued_cards(bid=bid, retailer=self.retailer, admin=self.admin, quantity=2)

        redeem(cards[0], self.consumer)
        self.assertEqual(retailer_earnings(self.retailer).flat_fee, Decimal("0.00"))

        void_card(card=cards[1], user=self.admin)
        assignment.refresh_from_db()
        self.assertEqual(assignment.status, DistributionAssignment.STATUS_COMPLETED)

        result = retailer_earnings(self.retailer)
        self.assertEqual(result.flat_fee, Decimal("20.00"))
        self.assertEqual(result.profit_share, Decimal("0.00"))


class WithdrawalTests(TestCase):
    """
    GUARANTEES:
    - pending and approved requests reserve balance; rejected ones release it
    - a request never exceeds the available balance
    """

    def setUp(self):
        self.admin = make_user("admin", "admin@example.com")
        self.user = make_user("consumer", "earner@example.com")
        for i in range(2):
            friend = make_user("consumer", f"friend{i}@example.com")
            record_referral(referrer_code=self.user.referral_code, referred=friend)

    def test_default_requests_full_balance(self):
        self.assertEqual(available_balance(self.user), Decimal("10.00"))

        req = request_withdrawal(user=self.user)

        self.assertEqual(req.amount_requested, Decimal("10.00"))
        self.assertEqual(req.status, WithdrawalRequest.STATUS_PENDING)
        self.assertEqual(available_balance(self.user), Decimal("0.00"))

        with self.assertRaises(InsufficientBalanceError):
            request_withdrawal(user=self.user)

    def test_cannot_exceed_balance(self):
        with self.assertRaises(InsufficientBalanceError):
            request_withdrawal(user=self.user, amount="10.01")
        with self.assertRaises(InsufficientBalanceError):
            request_withdrawal(user=self.user, amount="0")

        request_withdrawal(user=self.user, amount="4.00")
        with self.assertRaises(InsufficientBalanceError):
            request_withdrawal(user=self.user, amount="6.01")

    def test_rejection_releases_and_approval_keeps_reservation(self):
        first = request_withdrawal(user=self.user, amount="6.00")
        second = request_withdrawal(user=self.user, amount="4.00")

        review_withdrawal(request=first, reviewer=self.admin, approve=False)
        self.assertEqual(available_balance(self.user), Decimal("6.00"))

        reviewed = review_withdrawal(request=second, reviewer=self.admin, approve=True)
        self.assertEqual(reviewed.reviewed_by, self.admin)
        self.assertEqual(available_balance(self.user), Decimal("6.00"))

        with self.assertRaises(WithdrawalStateError):
            review_withdrawal(request=second, reviewer=self.admin, approve=False)

    def test_review_is_admin_only(self):
        req = request_withdrawal(user=self.user, amount="1.00")
        with self.assertRaises(WithdrawalPermissionError):
            review_withdrawal(request=req, reviewer=self.user, approve=True)


class EarningsApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin", "admin@example.com")
        self.user = make_user("retailer", "shop@example.com")
        friend = make_user("consumer", "friend@example.com")
        record_referral(referrer_code=self.user.referral_code, referred=friend)

    def test_summary(self):
        self.client.force_authenticate(self.user)
        res = self.client.get("/api/earnings/summary/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["referral_code"], self.user.referral_code)
        self.assertEqual(res.data["referrals"], {"count": 1, "total": "5.00"})
        self.assertEqual(res.data["total_earnings"], "5.00")
        self.assertEqual(res.data["available_balance"], "5.00")

    def test_withdrawal_flow(self):
        self.client.force_authenticate(self.user)
        res = self.client.post("/api/earnings/withdrawals/", {"amount": "9.00"}, format="json")
        self.assertEqual(res.status_code, 409)

        res = self.client.post("/api/earnings/withdrawals/", {}, format="json")
        self.assertEqual(res.status_code, 201)
        withdrawal_id = res.data["id"]

        res = self.client.post(
            f"/api/earnings/withdrawals/{withdrawal_id}/review/", {"approve": True}, format="json"
        )
        self.assertEqual(res.status_code, 403)

        self.client.force_authenticate(self.admin)
        res = self.client.post(
            f"/api/earnings/withdrawals/{withdrawal_id}/review/", {"approve": True}, format="json"
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["status"], "approved")

    def test_couriers_have_no_earnings(self):
        courier = make_user("courier", "rider@example.com")
        self.client.force_authenticate(courier)
        res = self.client.get("/api/earnings/summary/")
        self.assertEqual(res.status_code, 403)
