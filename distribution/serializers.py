# distribution/serializers.py

from rest_framework import serializers

from distribution.models import DistributionAssignment, DistributionBid


class DistributionBidSerializer(serializers.ModelSerializer):
    asset_title = serializers.CharField(source="asset.title", read_only=True)
    creator_email = serializers.EmailField(source="creator.email", read_only=True)
    quantity_remaining = serializers.IntegerField(read_only=True)

    class Meta:
        model = DistributionBid
        fields = [
            "id",
            "creator",
            "creator_email",
            "asset",
            "asset_title",
            "quantity",
            "quantity_reserved",
            "quantity_remaining",
            "region",
            "bid_type",
            "profit_percent",
            "flat_fee",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BidCreateSerializer(serializers.Serializer):
    asset = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    region = serializers.CharField(required=False, allow_blank=True, max_length=100, default="")
    bid_type = serializers.ChoiceField(choices=DistributionBid.TYPE_CHOICES)
    profit_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True, default=None
    )
    flat_fee = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, allow_null=True, default=None
    )


class BidReviewSerializer(serializers.Serializer):
    approve = serializers.BooleanField()


class BidAcceptSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, required=False, allow_null=True, default=None)


class BidAllocateSerializer(BidAcceptSerializer):
    retailer = serializers.UUIDField()


class DistributionAssignmentSerializer(serializers.ModelSerializer):
    retailer_email = serializers.EmailField(source="retailer.email", read_only=True)
    asset = serializers.UUIDField(source="bid.asset_id", read_only=True)
    asset_title = serializers.CharField(source="bid.asset.title", read_only=True)
    bid_type = serializers.CharField(source="bid.bid_type", read_only=True)

    class Meta:
        model = DistributionAssignment
        fields = [
            "id",
            "bid",
            "asset",
            "asset_title",
            "bid_type",
            "retailer",
            "retailer_email",
            "quantity",
            "status",
            "assigned_at",
            "activated_at",
            "completed_at",
            "cancelled_at",
        ]
        read_only_fields = fields
