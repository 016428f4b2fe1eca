import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("catalog", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="DistributionBid",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("quantity", models.PositiveIntegerField()),
                ("quantity_reserved", models.PositiveIntegerField(default=0)),
                ("region", models.CharField(blank=True, max_length=100)),
                (
                    "bid_type",
                    models.CharField(
                        choices=[("profit_share", "Profit share"), ("flat_fee", "Flat fee")],
                        max_length=20,
                    ),
                ),
                (
                    "profit_percent",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True),
                ),
                (
                    "flat_fee",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending review"),
                            ("open", "Open"),
                            ("accepted", "Accepted"),
                            ("fulfilled", "Fulfilled"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "asset",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bids",
                        to="catalog.digitalasset",
                    ),
                ),
                (
                    "creator",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="distribution_bids",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="distribution_bid_status_idx"),
                    models.Index(fields=["creator", "created_at"], name="distribution_bid_creator_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="chk_bid_quantity_gt_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantity_reserved__lte", models.F("quantity"))),
                        name="chk_bid_reserved_lte_quantity",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("profit_percent__isnull", True),
                            models.Q(("profit_percent__gt", 0), ("profit_percent__lte", 100)),
                            _connector="OR",
                        ),
                        name="chk_bid_profit_percent_range",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("flat_fee__isnull", True), ("flat_fee__gte", 0), _connector="OR"),
                        name="chk_bid_flat_fee_gte_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DistributionAssignment",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("quantity", models.PositiveIntegerField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("active", "Active"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("assigned_at", models.DateTimeField(auto_now_add=True)),
                ("activated_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "bid",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="assignments",
                        to="distribution.distributionbid",
                    ),
                ),
                (
                    "retailer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="distribution_assignments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-assigned_at"],
                "indexes": [
                    models.Index(fields=["retailer", "status"], name="distribution_asg_retailer_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="chk_assignment_quantity_gt_zero",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("status", "cancelled"), _negated=True),
                        fields=("bid", "retailer"),
                        name="uniq_live_assignment_per_retailer",
                    ),
                ],
            },
        ),
    ]
