# keybank/serializers.py

from rest_framework import serializers

from keybank.models import DisplayId, EncryptionKey
from keybank.services.generation import MAX_BATCH


class DisplayIdSerializer(serializers.ModelSerializer):
    class Meta:
        model = DisplayId
        fields = ["id", "code", "claimed", "claimed_at", "created_at"]
        read_only_fields = fields


class EncryptionKeySerializer(serializers.ModelSerializer):
    class Meta:
        model = EncryptionKey
        fields = [
            "id",
            "public_key",
            "price",
            "downloads_remaining",
            "claimed",
            "claimed_at",
            "assigned_to",
            "owner",
            "created_at",
        ]
        read_only_fields = fields


class GenerateDisplayIdsInputSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_BATCH)
    prefix = serializers.CharField(required=False, allow_blank=True, max_length=10, default="")


class GenerateKeysInputSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_BATCH)
    base_price = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=0,
        required=False,
        allow_null=True,
        default=None,
    )


class GeneratedKeyPairSerializer(serializers.Serializer):
    public_key = serializers.CharField()
    private_key = serializers.CharField()
