import re
from decimal import Decimal

from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from cards.tests.builders import make_asset, make_user
from keybank.models import DisplayId, EncryptionKey
from keybank.services.exceptions import DisplayIdPoolExhausted, GenerationError
from keybank.services.generation import (
    MAX_BATCH,
    fingerprint,
    generate_display_ids,
    generate_key_pairs,
)
from keybank.services.pool import claim_next_display_id, free_display_ids

CODE_RE = re.compile(r"^([A-Z0-9]+)-(\d{6})$")


class DisplayIdGenerationTests(TestCase):
    def test_codes_use_prefix_and_six_digit_range(self):
        codes = generate_display_ids(quantity=25, prefix="abc")

        self.assertEqual(len(codes), 25)
        self.assertEqual(len(set(codes)), 25)
        for code in codes:
            m = CODE_RE.match(code)
            self.assertIsNotNone(m, code)
            self.assertEqual(m.group(1), "ABC")
            self.assertTrue(100000 <= int(m.group(2)) <= 999999)

        self.assertEqual(DisplayId.objects.filter(code__startswith="ABC-").count(), 25)

    @override_settings(
        MARKETPLACE={
            "REDEMPTION_PAYOUT": Decimal("5.00"),
            "REFERRAL_REWARD": Decimal("1.00"),
            "DISPLAY_ID_PREFIX": "CMD",
            "KEY_BASE_PRICE": Decimal("2.50"),
            "KEY_DEFAULT_DOWNLOADS": 3,
        }
    )
    def test_default_prefix_comes_from_settings(self):
        codes = generate_display_ids(quantity=2)
        self.assertTrue(all(c.startswith("CMD-") for c in codes))

    def test_quantity_and_prefix_bounds(self):
        for bad in (0, -1, MAX_BATCH + 1, "x", True):
            with self.assertRaises(GenerationError):
                generate_display_ids(quantity=bad)

        with self.assertRaises(GenerationError):
            generate_display_ids(quantity=1, prefix="BAD-PREFIX")

        self.assertEqual(DisplayId.objects.count(), 0)


class KeyPairGenerationTests(TestCase):
    def test_only_public_half_and_fingerprint_are_stored(self):
        pairs = generate_key_pairs(quantity=3, base_price="4.5")

        self.assertEqual(len(pairs), 3)
        for pair in pairs:
            self.assertTrue(pair.public_key.startswith("PUB-"))
            self.assertTrue(pair.private_key.startswith("PRIV-"))

            key = EncryptionKey.objects.get(public_key=pair.public_key)
            self.assertEqual(key.private_key_fingerprint, fingerprint(pair.private_key))
            self.assertNotEqual(key.private_key_fingerprint, pair.private_key)
            self.assertEqual(key.price, Decimal("4.50"))
            self.assertFalse(key.claimed)
            self.assertIsNone(key.owner)

    def test_negative_price_is_rejected(self):
        with self.assertRaises(GenerationError):
            generate_key_pairs(quantity=1, base_price="-1")

    def test_owner_is_recorded(self):
        buyer = make_user("consumer", "buyer@example.com")
        generate_key_pairs(quantity=2, owner=buyer)
        self.assertEqual(EncryptionKey.objects.filter(owner=buyer).count(), 2)


class DisplayIdClaimTests(TestCase):
    def test_claim_takes_free_codes_until_exhausted(self):
        generate_display_ids(quantity=2)

        first = claim_next_display_id()
        second = claim_next_display_id()

        self.assertNotEqual(first.pk, second.pk)
        self.assertTrue(first.claimed)
        self.assertIsNotNone(first.claimed_at)
        self.assertFalse(free_display_ids().exists())

        with self.assertRaises(DisplayIdPoolExhausted):
            claim_next_display_id()

    def test_codes_bound_to_assets_are_not_free(self):
        creator = make_user("creator", "creator@example.com")
        generate_display_ids(quantity=1)
        asset = make_asset(creator)
        asset.display_id = DisplayId.objects.get()
        asset.save(update_fields=["display_id"])

        self.assertFalse(free_display_ids().exists())


class KeybankApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin", "admin@example.com")
        self.consumer = make_user("consumer", "consumer@example.com")

    def test_generation_is_admin_only(self):
        self.client.force_authenticate(self.consumer)
        res = self.client.post("/api/keybank/display-ids/generate/", {"quantity": 2}, format="json")
        self.assertEqual(res.status_code, 403)

        self.client.force_authenticate(self.admin)
        res = self.client.post("/api/keybank/display-ids/generate/", {"quantity": 2}, format="json")
        self.assertEqual(res.status_code, 201)
        self.assertEqual(len(res.data["codes"]), 2)

    def test_key_generation_returns_private_keys_once(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post("/api/keybank/keys/generate/", {"quantity": 2}, format="json")
        self.assertEqual(res.status_code, 201)
        self.assertEqual(len(res.data), 2)
        self.assertIn("private_key", res.data[0])

        res = self.client.get("/api/keybank/keys/")
        self.assertEqual(res.data["count"], 2)
        self.assertNotIn("private_key", res.data["results"][0])
        self.assertNotIn("private_key_fingerprint", res.data["results"][0])

    def test_filter_by_claimed(self):
        generate_display_ids(quantity=3)
        claim_next_display_id()

        self.client.force_authenticate(self.admin)
        res = self.client.get("/api/keybank/display-ids/?claimed=false")
        self.assertEqual(res.data["count"], 2)
        res = self.client.get("/api/keybank/display-ids/?claimed=true")
        self.assertEqual(res.data["count"], 1)
