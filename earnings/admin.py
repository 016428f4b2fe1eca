# earnings/admin.py

from django.contrib import admin

from earnings.models import Referral, WithdrawalRequest


@admin.register(Referral)
class ReferralAdmin(admin.ModelAdmin):
    list_display = ("referrer", "referred", "created_at")
    search_fields = ("referrer__email", "referred__email")


@admin.register(WithdrawalRequest)
class WithdrawalRequestAdmin(admin.ModelAdmin):
    list_display = ("user", "amount_requested", "status", "created_at", "reviewed_by")
    list_filter = ("status",)
    search_fields = ("user__email",)
    readonly_fields = ("created_at", "reviewed_at", "reviewed_by")
