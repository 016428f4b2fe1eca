from types import SimpleNamespace

from django.test import TestCase

from cards.tests.builders import make_user
from permissions.roles import (
    CAP_CARDS_REDEEM,
    CAP_DELIVERIES_COURIER,
    CAP_KEYS_GENERATE,
    CAP_ORDERS_SETTLE,
    HasAnyCapability,
    HasCapability,
    capabilities_for,
    is_admin,
)


class CapabilityMapTests(TestCase):
    def test_admin_has_everything(self):
        admin = make_user("admin", "admin@example.com")
        self.assertTrue(is_admin(admin))
        self.assertIn(CAP_KEYS_GENERATE, capabilities_for(admin))
        self.assertIn(CAP_ORDERS_SETTLE, capabilities_for(admin))

    def test_superuser_is_admin_whatever_the_role(self):
        user = make_user("consumer", "root@example.com", is_superuser=True)
        self.assertTrue(is_admin(user))
        self.assertIn(CAP_KEYS_GENERATE, capabilities_for(user))

    def test_courier_only_delivers(self):
        courier = make_user("courier", "rider@example.com")
        self.assertEqual(capabilities_for(courier), {CAP_DELIVERIES_COURIER})
        self.assertFalse(is_admin(courier))


class CapabilityPermissionTests(TestCase):
    def setUp(self):
        self.consumer = make_user("consumer", "consumer@example.com")

    def _request(self, user):
        return SimpleNamespace(user=user)

    def test_has_capability_denies_without_declaration(self):
        view = SimpleNamespace()
        self.assertFalse(HasCapability().has_permission(self._request(self.consumer), view))

    def test_has_capability(self):
        allowed = SimpleNamespace(required_capability=CAP_CARDS_REDEEM)
        denied = SimpleNamespace(required_capability=CAP_KEYS_GENERATE)

        self.assertTrue(HasCapability().has_permission(self._request(self.consumer), allowed))
        self.assertFalse(HasCapability().has_permission(self._request(self.consumer), denied))

    def test_has_any_capability(self):
        view = SimpleNamespace(required_any_capabilities={CAP_KEYS_GENERATE, CAP_CARDS_REDEEM})
        self.assertTrue(HasAnyCapability().has_permission(self._request(self.consumer), view))

        view = SimpleNamespace(required_any_capabilities={CAP_KEYS_GENERATE})
        self.assertFalse(HasAnyCapability().has_permission(self._request(self.consumer), view))
