from django.test import TestCase

from cards.models import CommandCard
from cards.services.exceptions import (
    CardPermissionError,
    CardStateError,
    InsufficientPoolError,
    IssuanceError,
)
from cards.services.issuance import activate_cards, issue_cards, void_card
from cards.services.serials import SERIAL_RE, normalize_serial
from cards.tests.builders import fill_pool, make_asset, make_user, open_bid
from distribution.models import DistributionAssignment
from distribution.services.allocation import allocate
from keybank.services.pool import free_display_ids, free_encryption_keys


class CardIssuanceTests(TestCase):
    """
    GUARANTEES:
    - Issuance binds one free display ID + one free key per card
    - A short pool writes nothing
    - Only pending assignments can be issued, and only by admins
    """

    def setUp(self):
        self.admin = make_user("admin", "admin@example.com")
        self.creator = make_user("creator", "creator@example.com")
        self.retailer = make_user("retailer", "retailer@example.com")
        self.asset = make_asset(self.creator)
        self.bid = open_bid(creator=self.creator, asset=self.asset, admin=self.admin, quantity=3)
        self.assignment = allocate(bid=self.bid, retailer=self.retailer)

    def test_issue_binds_pool_rows_and_activates_assignment(self):
        fill_pool(5)

        cards = issue_cards(assignment=self.assignment, issuer=self.admin)

        self.assertEqual(len(cards), 3)
        self.assertEqual(CommandCard.objects.filter(assignment=self.assignment).count(), 3)
        for card in CommandCard.objects.filter(assignment=self.assignment):
            self.assertRegex(card.serial_code, SERIAL_RE)
            self.assertEqual(card.status, CommandCard.STATUS_ISSUED)
            self.assertEqual(card.retailer_id, self.retailer.id)
            self.assertEqual(card.asset_id, self.asset.id)

        self.assertEqual(free_display_ids().count(), 2)
        self.assertEqual(free_encryption_keys().count(), 2)

        self.assignment.refresh_from_db()
        self.assertEqual(self.assignment.status, DistributionAssignment.STATUS_ACTIVE)
        self.assertIsNotNone(self.assignment.activated_at)

    def test_short_pool_writes_nothing(self):
        fill_pool(2)

        with self.assertRaises(InsufficientPoolError):
            issue_cards(assignment=self.assignment, issuer=self.admin)

        self.assertEqual(CommandCard.objects.count(), 0)
        self.assignment.refresh_from_db()
        self.assertEqual(self.assignment.status, DistributionAssignment.STATUS_PENDING)

    def test_cannot_issue_twice(self):
        fill_pool(6)
        issue_cards(assignment=self.assignment, issuer=self.admin)

        with self.assertRaises(IssuanceError):
            issue_cards(assignment=self.assignment, issuer=self.admin)
        self.assertEqual(CommandCard.objects.count(), 3)

    def test_non_admin_cannot_issue(self):
        fill_pool(3)
        with self.assertRaises(CardPermissionError):
            issue_cards(assignment=self.assignment, issuer=self.retailer)


class CardActivationTests(TestCase):
    def setUp(self):
        self.admin = make_user("admin", "admin@example.com")
        self.creator = make_user("creator", "creator@example.com")
        self.retailer = make_user("retailer", "retailer@example.com")
        self.other_retailer = make_user("retailer", "other@example.com")
        asset = make_asset(self.creator)
        bid = open_bid(creator=self.creator, asset=asset, admin=self.admin, quantity=2)
        fill_pool(2)
        assignment = allocate(bid=bid, retailer=self.retailer)
        self.cards = issue_cards(assignment=assignment, issuer=self.admin)

    def test_activation_moves_issued_to_active(self):
        result = activate_cards(retailer=self.retailer, card_ids=[c.pk for c in self.cards])

        self.assertEqual(result.activated, 2)
        self.assertEqual(result.rejected, [])
        self.assertEqual(
            CommandCard.objects.filter(status=CommandCard.STATUS_ACTIVE).count(),
            2,
        )

    def test_activation_never_redeems(self):
        activate_cards(retailer=self.retailer, card_ids=[self.cards[0].pk])

        card = CommandCard.objects.get(pk=self.cards[0].pk)
        self.assertEqual(card.status, CommandCard.STATUS_ACTIVE)
        self.assertIsNone(card.redeemed_by)
        self.assertIsNone(card.redeemed_at)

    def test_foreign_and_already_active_cards_are_reported(self):
        activate_cards(retailer=self.retailer, card_ids=[self.cards[0].pk])

        result = activate_cards(retailer=self.retailer, card_ids=[c.pk for c in self.cards])
        self.assertEqual(result.activated, 1)
        self.assertEqual(result.rejected, [{"id": str(self.cards[0].pk), "reason": "status_active"}])

        result = activate_cards(retailer=self.other_retailer, card_ids=[self.cards[1].pk])
        self.assertEqual(result.activated, 0)
        self.assertEqual(result.rejected[0]["reason"], "not_found")

    def test_void_card(self):
        card = void_card(card=self.cards[0], user=self.admin)
        self.assertEqual(card.status, CommandCard.STATUS_VOID)

        with self.assertRaises(CardStateError):
            void_card(card=self.cards[0], user=self.admin)

        with self.assertRaises(CardPermissionError):
            void_card(card=self.cards[1], user=self.retailer)


class SerialTests(TestCase):
    def test_normalize_regroups_user_input(self):
        self.assertEqual(normalize_serial(" abcd efgh-jklm npqr "), "ABCD-EFGH-JKLM-NPQR")

    def test_normalize_keeps_unparseable_input(self):
        self.assertEqual(normalize_serial("short"), "SHORT")
