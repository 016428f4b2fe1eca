# cards/serializers.py

from rest_framework import serializers

from cards.models import AssetAccessLog, CommandCard, Redemption


class CommandCardSerializer(serializers.ModelSerializer):
    asset_title = serializers.CharField(source="asset.title", read_only=True)
    display_code = serializers.CharField(source="display_id.code", read_only=True)
    public_key = serializers.CharField(source="encryption_key.public_key", read_only=True)

    class Meta:
        model = CommandCard
        fields = [
            "id",
            "serial_code",
            "asset",
            "asset_title",
            "assignment",
            "retailer",
            "display_code",
            "public_key",
            "status",
            "activated_at",
            "redeemed_by",
            "redeemed_at",
            "voided_at",
            "created_at",
        ]
        read_only_fields = fields


class RedemptionSerializer(serializers.ModelSerializer):
    serial_code = serializers.CharField(source="card.serial_code", read_only=True)
    asset_title = serializers.CharField(source="asset.title", read_only=True)
    asset_type = serializers.CharField(source="asset.type", read_only=True)
    master_file_url = serializers.URLField(source="asset.master_file_url", read_only=True)
    display_code = serializers.CharField(source="display_id.code", read_only=True)
    public_key = serializers.CharField(source="encryption_key.public_key", read_only=True)

    class Meta:
        model = Redemption
        fields = [
            "id",
            "serial_code",
            "asset",
            "asset_title",
            "asset_type",
            "master_file_url",
            "display_code",
            "public_key",
            "created_at",
        ]
        read_only_fields = fields


class AssetAccessLogSerializer(serializers.ModelSerializer):
    asset_title = serializers.CharField(source="asset.title", read_only=True)
    master_file_url = serializers.URLField(source="asset.master_file_url", read_only=True)

    class Meta:
        model = AssetAccessLog
        fields = ["id", "asset", "asset_title", "master_file_url", "method", "redemption", "reference", "created_at"]
        read_only_fields = fields


class RedeemInputSerializer(serializers.Serializer):
    serial_code = serializers.CharField(max_length=64)
    display_id = serializers.CharField(max_length=32)
    public_key = serializers.CharField(max_length=64)


class IssueCardsInputSerializer(serializers.Serializer):
    assignment = serializers.UUIDField()


class ActivateCardsInputSerializer(serializers.Serializer):
    card_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False, max_length=1000)


class ActivationResultSerializer(serializers.Serializer):
    activated = serializers.IntegerField()
    rejected = serializers.ListField(child=serializers.DictField())
