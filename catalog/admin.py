# catalog/admin.py

from django.contrib import admin

from catalog.models import DigitalAsset


@admin.register(DigitalAsset)
class DigitalAssetAdmin(admin.ModelAdmin):
    list_display = ("title", "type", "creator", "price", "published", "display_id", "created_at")
    list_filter = ("type", "published")
    search_fields = ("title", "creator__email")
    readonly_fields = ("display_id", "created_at", "updated_at")
