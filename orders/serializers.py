# orders/serializers.py

from rest_framework import serializers

from keybank.services.generation import MAX_BATCH
from orders.models import Order


class OrderSerializer(serializers.ModelSerializer):
    asset_title = serializers.CharField(source="asset.title", read_only=True, default=None)

    class Meta:
        model = Order
        fields = [
            "id",
            "user",
            "asset",
            "asset_title",
            "kind",
            "amount",
            "currency",
            "payment_status",
            "metadata",
            "created_at",
            "paid_at",
        ]
        read_only_fields = fields


class AssetOrderInputSerializer(serializers.Serializer):
    asset = serializers.UUIDField()


class KeyOrderInputSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_BATCH)


class KeyQuoteSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)


class SettleOrderInputSerializer(serializers.Serializer):
    paid = serializers.BooleanField()
