from unittest import mock

from django.db.models.query import QuerySet
from django.test import TestCase
from rest_framework.test import APIClient

from cards.models import AssetAccessLog, CommandCard, Redemption
from cards.services.exceptions import (
    AlreadyClaimedError,
    AlreadyRedeemedError,
    CardNotActiveError,
    CredentialMismatchError,
    InvalidDisplayIdError,
    InvalidPublicKeyError,
    InvalidSerialError,
    RedemptionConflictError,
)
from cards.services.issuance import void_card
from cards.services.redemption import redeem_card
from cards.tests.builders import fill_pool, issued_cards, make_asset, make_user, open_bid
from catalog.models import DigitalAsset
from distribution.models import DistributionAssignment, DistributionBid
from keybank.models import DisplayId, EncryptionKey


def credentials(card):
    return {
        "serial_code": card.serial_code,
        "display_id": card.display_id.code,
        "public_key": card.encryption_key.public_key,
    }


class RedemptionServiceTests(TestCase):
    """
    GUARANTEES:
    - card, display ID and key are consumed together or not at all
    - a replay by the redeemer returns the original redemption
    - anyone else gets AlreadyRedeemedError
    """

    def setUp(self):
        self.admin = make_user("admin", "admin@example.com")
        self.creator = make_user("creator", "creator@example.com")
        self.retailer = make_user("retailer", "retailer@example.com")
        self.consumer = make_user("consumer", "consumer@example.com")
        self.other = make_user("consumer", "other@example.com")

        self.asset = make_asset(self.creator)
        fill_pool(4)
        self.bid = open_bid(creator=self.creator, asset=self.asset, admin=self.admin, quantity=2)
        self.assignment, self.cards = issued_cards(bid=self.bid, retailer=self.retailer, admin=self.admin)
        self.card = self.cards[0]

    def test_redeem_consumes_card_display_id_and_key(self):
        result = redeem_card(user=self.consumer, **credentials(self.card))

        self.assertFalse(result.replayed)
        self.assertEqual(result.redemption.user_id, self.consumer.id)

        card = CommandCard.objects.get(pk=self.card.pk)
        self.assertEqual(card.status, CommandCard.STATUS_REDEEMED)
        self.assertEqual(card.redeemed_by_id, self.consumer.id)

        self.assertTrue(DisplayId.objects.get(pk=card.display_id_id).claimed)
        key = EncryptionKey.objects.get(pk=card.encryption_key_id)
        self.assertTrue(key.claimed)
        self.assertEqual(key.assigned_to_id, self.consumer.id)

        log = AssetAccessLog.objects.get(redemption=result.redemption)
        self.assertEqual(log.method, AssetAccessLog.METHOD_CARD)
        self.assertEqual(log.asset_id, self.asset.id)

    def test_inputs_are_normalised(self):
        creds = credentials(self.card)
        creds["serial_code"] = " " + creds["serial_code"].lower().replace("-", " ") + " "
        creds["display_id"] = creds["display_id"].lower()

        result = redeem_card(user=self.consumer, **creds)
        self.assertFalse(result.replayed)

    def test_replay_by_same_user_returns_original(self):
        first = redeem_card(user=self.consumer, **credentials(self.card))
        second = redeem_card(user=self.consumer, **credentials(self.card))

        self.assertTrue(second.replayed)
        self.assertEqual(first.redemption.pk, second.redemption.pk)
        self.assertEqual(Redemption.objects.count(), 1)
        self.assertEqual(AssetAccessLog.objects.count(), 1)

    def test_other_user_cannot_redeem_again(self):
        redeem_card(user=self.consumer, **credentials(self.card))

        with self.assertRaises(AlreadyRedeemedError):
            redeem_card(user=self.other, **credentials(self.card))

    def test_unknown_references(self):
        creds = credentials(self.card)

        with self.assertRaises(InvalidSerialError):
            redeem_card(user=self.consumer, **{**creds, "serial_code": "ZZZZ-ZZZZ-ZZZZ-ZZZZ"})
        with self.assertRaises(InvalidDisplayIdError):
            redeem_card(user=self.consumer, **{**creds, "display_id": "NOPE-000000"})
        with self.assertRaises(InvalidPublicKeyError):
            redeem_card(user=self.consumer, **{**creds, "public_key": "PUB-missing"})

    def test_credentials_of_another_card_are_rejected(self):
        creds = credentials(self.card)
        creds["public_key"] = self.cards[1].encryption_key.public_key

        with self.assertRaises(CredentialMismatchError):
            redeem_card(user=self.consumer, **creds)

        self.assertEqual(CommandCard.objects.get(pk=self.card.pk).status, CommandCard.STATUS_ACTIVE)
        self.assertFalse(EncryptionKey.objects.get(pk=self.cards[1].encryption_key_id).claimed)

    def test_unsold_card_cannot_be_redeemed(self):
        CommandCard.objects.filter(pk=self.card.pk).update(status=CommandCard.STATUS_ISSUED)

        with self.assertRaises(CardNotActiveError):
            redeem_card(user=self.consumer, **credentials(self.card))
        self.assertEqual(Redemption.objects.count(), 0)

    def _assert_nothing_redeemed(self):
        card = CommandCard.objects.get(pk=self.card.pk)
        self.assertEqual(card.status, CommandCard.STATUS_ACTIVE)
        self.assertIsNone(card.redeemed_by_id)
        self.assertFalse(DisplayId.objects.get(pk=card.display_id_id).claimed)
        key = EncryptionKey.objects.get(pk=card.encryption_key_id)
        self.assertFalse(key.claimed)
        self.assertIsNone(key.assigned_to_id)
        self.assertFalse(AssetAccessLog.objects.exists())

    def test_claimed_display_id_blocks_redemption(self):
        DisplayId.objects.filter(pk=self.card.display_id_id).update(claimed=True)

        with self.assertRaises(AlreadyClaimedError):
            redeem_card(user=self.consumer, **credentials(self.card))

        self.assertEqual(CommandCard.objects.get(pk=self.card.pk).status, CommandCard.STATUS_ACTIVE)
        self.assertFalse(Redemption.objects.exists())

    def test_lost_key_update_rolls_back_card_and_display_id(self):
        real_update = QuerySet.update

        def key_already_taken(qs, **kwargs):
            if qs.model is EncryptionKey:
                return 0
            return real_update(qs, **kwargs)

        with mock.patch.object(QuerySet, "update", autospec=True, side_effect=key_already_taken):
            with self.assertRaises(RedemptionConflictError):
                redeem_card(user=self.consumer, **credentials(self.card))

        self.assertFalse(Redemption.objects.exists())
        self._assert_nothing_redeemed()

    def _record_redemption(self, user):
        return Redemption.objects.create(
            card=self.card,
            user=user,
            asset=self.asset,
            display_id=self.card.display_id,
            encryption_key=self.card.encryption_key,
        )

    def test_duplicate_insert_by_same_user_resolves_as_replay(self):
        winner = self._record_redemption(self.consumer)

        result = redeem_card(user=self.consumer, **credentials(self.card))

        self.assertTrue(result.replayed)
        self.assertEqual(result.redemption.pk, winner.pk)
        self.assertEqual(Redemption.objects.count(), 1)
        self._assert_nothing_redeemed()

    def test_duplicate_insert_by_other_user_is_already_redeemed(self):
        self._record_redemption(self.other)

        with self.assertRaises(AlreadyRedeemedError):
            redeem_card(user=self.consumer, **credentials(self.card))

        self.assertEqual(Redemption.objects.get().user_id, self.other.id)
        self._assert_nothing_redeemed()

    def test_last_redemption_completes_assignment_and_fulfils_bid(self):
        redeem_card(user=self.consumer, **credentials(self.cards[0]))
        self.assignment.refresh_from_db()
        self.assertEqual(self.assignment.status, DistributionAssignment.STATUS_ACTIVE)

        redeem_card(user=self.other, **credentials(self.cards[1]))
        self.assignment.refresh_from_db()
        self.assertEqual(self.assignment.status, DistributionAssignment.STATUS_COMPLETED)

        self.bid.refresh_from_db()
        self.assertEqual(self.bid.status, DistributionBid.STATUS_FULFILLED)

    def test_void_counts_towards_completion(self):
        redeem_card(user=self.consumer, **credentials(self.cards[0]))
        void_card(card=self.cards[1], user=self.admin)

        self.assignment.refresh_from_db()
        self.assertEqual(self.assignment.status, DistributionAssignment.STATUS_COMPLETED)


class RedemptionApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin", "admin@example.com")
        self.creator = make_user("creator", "creator@example.com")
        self.retailer = make_user("retailer", "retailer@example.com")
        self.consumer = make_user("consumer", "consumer@example.com")
        self.courier = make_user("courier", "courier@example.com")
        self.other = make_user("consumer", "other@example.com")

        asset = make_asset(self.creator)
        fill_pool(1)
        bid = open_bid(creator=self.creator, asset=asset, admin=self.admin, quantity=1)
        _, cards = issued_cards(bid=bid, retailer=self.retailer, admin=self.admin)
        self.card = cards[0]
        self.asset = asset

    def test_redeem_then_replay(self):
        self.client.force_authenticate(self.consumer)

        res = self.client.post("/api/cards/redeem/", credentials(self.card), format="json")
        self.assertEqual(res.status_code, 201)
        self.assertFalse(res.data["replayed"])

        res = self.client.post("/api/cards/redeem/", credentials(self.card), format="json")
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["replayed"])

        res = self.client.get("/api/cards/redemptions/mine/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)

    def test_conflict_for_second_user(self):
        self.client.force_authenticate(self.consumer)
        self.client.post("/api/cards/redeem/", credentials(self.card), format="json")

        self.client.force_authenticate(self.creator)
        res = self.client.post("/api/cards/redeem/", credentials(self.card), format="json")
        self.assertEqual(res.status_code, 409)

    def test_unknown_serial_is_404(self):
        self.client.force_authenticate(self.consumer)
        payload = {**credentials(self.card), "serial_code": "ZZZZ-ZZZZ-ZZZZ-ZZZZ"}
        res = self.client.post("/api/cards/redeem/", payload, format="json")
        self.assertEqual(res.status_code, 404)

    def test_courier_cannot_redeem(self):
        self.client.force_authenticate(self.courier)
        res = self.client.post("/api/cards/redeem/", credentials(self.card), format="json")
        self.assertEqual(res.status_code, 403)

    def test_retailer_lists_only_own_cards(self):
        self.client.force_authenticate(self.retailer)
        res = self.client.get("/api/cards/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["serial_code"], self.card.serial_code)

    def test_assignment_filter(self):
        self.client.force_authenticate(self.retailer)

        res = self.client.get("/api/cards/", {"assignment": str(self.card.assignment_id)})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["count"], 1)

        res = self.client.get("/api/cards/", {"assignment": "not-a-uuid"})
        self.assertEqual(res.status_code, 400)
        self.assertIn("assignment", res.data)

    def test_redeemer_can_fetch_master_file(self):
        url = "https://files.example.com/guide.pdf"
        DigitalAsset.objects.filter(pk=self.asset.pk).update(master_file_url=url)

        self.client.force_authenticate(self.consumer)
        res = self.client.post("/api/cards/redeem/", credentials(self.card), format="json")
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["master_file_url"], url)

        res = self.client.get("/api/cards/redemptions/mine/")
        self.assertEqual(res.data["results"][0]["master_file_url"], url)

        res = self.client.get("/api/cards/access/mine/")
        self.assertEqual(res.data["results"][0]["master_file_url"], url)

        self.client.force_authenticate(self.other)
        for path in ("/api/cards/redemptions/mine/", "/api/cards/access/mine/"):
            res = self.client.get(path)
            self.assertEqual(res.data["count"], 0)
        res = self.client.get(f"/api/catalog/marketplace/{self.asset.pk}/")
        self.assertEqual(res.status_code, 200)
        self.assertNotIn("master_file_url", res.data)
