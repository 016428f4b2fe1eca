# earnings/serializers.py

from rest_framework import serializers

from earnings.models import Referral, WithdrawalRequest


class ReferralSerializer(serializers.ModelSerializer):
    referred_email = serializers.EmailField(source="referred.email", read_only=True)

    class Meta:
        model = Referral
        fields = ["id", "referred", "referred_email", "created_at"]
        read_only_fields = fields


class WithdrawalRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = WithdrawalRequest
        fields = [
            "id",
            "user",
            "amount_requested",
            "status",
            "created_at",
            "reviewed_at",
            "reviewed_by",
        ]
        read_only_fields = fields


class WithdrawalCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
        required=False,
        allow_null=True,
        default=None,
    )


class WithdrawalReviewSerializer(serializers.Serializer):
    approve = serializers.BooleanField()


class EarningsSummarySerializer(serializers.Serializer):
    referral_code = serializers.CharField()
    creator = serializers.DictField()
    retailer = serializers.DictField()
    referrals = serializers.DictField()
    total_earnings = serializers.DecimalField(max_digits=12, decimal_places=2)
    reserved_withdrawals = serializers.DecimalField(max_digits=12, decimal_places=2)
    available_balance = serializers.DecimalField(max_digits=12, decimal_places=2)
