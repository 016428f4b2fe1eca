# catalog/serializers.py

from rest_framework import serializers

from catalog.models import DigitalAsset


class DigitalAssetSerializer(serializers.ModelSerializer):
    creator_email = serializers.EmailField(source="creator.email", read_only=True)
    display_code = serializers.CharField(source="display_id.code", read_only=True, default=None)

    class Meta:
        model = DigitalAsset
        fields = [
            "id",
            "creator",
            "creator_email",
            "title",
            "description",
            "type",
            "price",
            "published",
            "metadata",
            "cover_image_url",
            "master_file_url",
            "display_code",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "creator",
            "creator_email",
            "published",
            "display_code",
            "created_at",
            "updated_at",
        ]

    def validate_title(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("title is required")
        return value

    def validate_metadata(self, value):
        if value in (None, ""):
            return {}
        if not isinstance(value, dict):
            raise serializers.ValidationError("metadata must be an object")
        return value


class MarketplaceAssetSerializer(serializers.ModelSerializer):
    """
    Public listing: never exposes master_file_url.
    """

    creator_email = serializers.EmailField(source="creator.email", read_only=True)
    display_code = serializers.CharField(source="display_id.code", read_only=True, default=None)

    class Meta:
        model = DigitalAsset
        fields = [
            "id",
            "creator_email",
            "title",
            "description",
            "type",
            "price",
            "metadata",
            "cover_image_url",
            "display_code",
            "created_at",
        ]
        read_only_fields = fields
