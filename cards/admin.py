# cards/admin.py

from django.contrib import admin

from cards.models import AssetAccessLog, CommandCard, Redemption


@admin.register(CommandCard)
class CommandCardAdmin(admin.ModelAdmin):
    list_display = ("serial_code", "asset", "retailer", "status", "activated_at", "redeemed_at")
    list_filter = ("status",)
    search_fields = ("serial_code", "display_id__code", "encryption_key__public_key")
    readonly_fields = (
        "serial_code",
        "display_id",
        "encryption_key",
        "redeemed_by",
        "redeemed_at",
        "created_at",
    )


@admin.register(Redemption)
class RedemptionAdmin(admin.ModelAdmin):
    list_display = ("card", "user", "asset", "created_at")
    search_fields = ("card__serial_code", "user__email")

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(AssetAccessLog)
class AssetAccessLogAdmin(admin.ModelAdmin):
    list_display = ("user", "asset", "method", "created_at")
    list_filter = ("method",)

    def has_change_permission(self, request, obj=None):
        return False
