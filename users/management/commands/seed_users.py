# users/management/commands/seed_users.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from permissions.roles import (
    ROLE_ADMIN,
    ROLE_CONSUMER,
    ROLE_COURIER,
    ROLE_CREATOR,
    ROLE_RETAILER,
)


@dataclass(frozen=True)
class SeedUser:
    label: str
    role: str
    email: str
    first_name: str = ""
    last_name: str = ""


SEED_USERS = [
    SeedUser("Admin", ROLE_ADMIN, "admin@example.com", "System", "Admin"),
    SeedUser("Creator", ROLE_CREATOR, "creator@example.com", "Demo", "Creator"),
    SeedUser("Retailer", ROLE_RETAILER, "retailer@example.com", "Corner", "Shop"),
    SeedUser("Courier", ROLE_COURIER, "courier@example.com", "Fast", "Courier"),
    SeedUser("Consumer", ROLE_CONSUMER, "consumer@example.com", "Jane", "Doe"),
]


class Command(BaseCommand):
    help = "Seed one demo user per marketplace role."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for seeded users (default: Pass1234!)",
        )
        parser.add_argument(
            "--force-password",
            action="store_true",
            help="Reset password for existing seeded users too.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        password = options.get("password") or ""
        force_password = bool(options.get("force_password"))

        if len(password) < 6:
            raise CommandError("--password must be at least 6 characters.")

        User = get_user_model()

        created_count = 0
        updated_count = 0

        for seed in SEED_USERS:
            is_admin = seed.role == ROLE_ADMIN
            user = User.objects.filter(email__iexact=seed.email).first()

            if user is None:
                User.objects.create_user(
                    email=seed.email,
                    password=password,
                    role=seed.role,
                    first_name=seed.first_name,
                    last_name=seed.last_name,
                    is_staff=is_admin,
                    is_superuser=is_admin,
                )
                created_count += 1
                self.stdout.write(f"created: {seed.label} ({seed.role}) -> {seed.email}")
                continue

            dirty = False
            if user.role != seed.role:
                user.role = seed.role
                dirty = True
            if user.is_superuser != is_admin or user.is_staff != is_admin:
                user.is_superuser = is_admin
                user.is_staff = is_admin
                dirty = True
            if force_password:
                user.set_password(password)
                dirty = True

            if dirty:
                user.save()
                updated_count += 1

            self.stdout.write(f"exists:  {seed.label} ({seed.role}) -> {seed.email}")

        self.stdout.write("\n--- Summary ---")
        self.stdout.write(f"Created: {created_count}")
        self.stdout.write(f"Updated: {updated_count}")
