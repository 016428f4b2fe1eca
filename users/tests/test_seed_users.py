from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from users.models import User


class SeedUsersCommandTests(TestCase):
    def test_seeds_one_user_per_role(self):
        call_command("seed_users", stdout=StringIO())

        self.assertEqual(User.objects.count(), 5)
        admin = User.objects.get(email="admin@example.com")
        self.assertTrue(admin.is_superuser)
        self.assertEqual(
            set(User.objects.values_list("role", flat=True)),
            {"admin", "creator", "retailer", "courier", "consumer"},
        )

    def test_rerun_is_idempotent_and_can_reset_passwords(self):
        call_command("seed_users", stdout=StringIO())
        call_command("seed_users", "--password", "newpass1", "--force-password", stdout=StringIO())

        self.assertEqual(User.objects.count(), 5)
        self.assertTrue(User.objects.get(email="retailer@example.com").check_password("newpass1"))

    def test_short_password_is_rejected(self):
        with self.assertRaises(CommandError):
            call_command("seed_users", "--password", "abc", stdout=StringIO())
