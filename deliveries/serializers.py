# deliveries/serializers.py

from rest_framework import serializers

from deliveries.models import CourierAssignment, Delivery
from deliveries.services.deliveries import decode_label


class CourierAssignmentSerializer(serializers.ModelSerializer):
    courier_email = serializers.EmailField(source="courier.email", read_only=True)

    class Meta:
        model = CourierAssignment
        fields = ["id", "delivery", "courier", "courier_email", "status", "created_at", "updated_at"]
        read_only_fields = fields


class DeliverySerializer(serializers.ModelSerializer):
    asset_title = serializers.CharField(source="asset.title", read_only=True)
    label = serializers.SerializerMethodField()

    class Meta:
        model = Delivery
        fields = [
            "id",
            "sender",
            "asset",
            "asset_title",
            "recipient_pubkey",
            "encrypted_label",
            "label",
            "status",
            "created_at",
            "updated_at",
            "delivered_at",
        ]
        read_only_fields = fields

    def get_label(self, obj) -> str:
        return decode_label(obj.encrypted_label)


class DeliveryCreateSerializer(serializers.Serializer):
    asset = serializers.UUIDField()
    recipient_pubkey = serializers.CharField(max_length=64)
    label = serializers.CharField(max_length=2000)


class AssignCourierSerializer(serializers.Serializer):
    courier = serializers.UUIDField()
