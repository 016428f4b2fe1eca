# keybank/admin.py

from django.contrib import admin

from keybank.models import DisplayId, EncryptionKey


@admin.register(DisplayId)
class DisplayIdAdmin(admin.ModelAdmin):
    list_display = ("code", "claimed", "claimed_at", "created_at")
    list_filter = ("claimed",)
    search_fields = ("code",)
    readonly_fields = ("code", "claimed", "claimed_at", "created_at")


@admin.register(EncryptionKey)
class EncryptionKeyAdmin(admin.ModelAdmin):
    list_display = ("public_key", "price", "claimed", "assigned_to", "owner", "created_at")
    list_filter = ("claimed",)
    search_fields = ("public_key", "private_key_fingerprint")
    readonly_fields = (
        "public_key",
        "private_key_fingerprint",
        "claimed",
        "claimed_at",
        "assigned_to",
        "created_at",
    )
