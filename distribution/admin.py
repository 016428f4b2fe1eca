# distribution/admin.py

from django.contrib import admin

from distribution.models import DistributionAssignment, DistributionBid


class DistributionAssignmentInline(admin.TabularInline):
    model = DistributionAssignment
    extra = 0
    fields = ("retailer", "quantity", "status", "assigned_at", "completed_at")
    readonly_fields = fields
    can_delete = False


@admin.register(DistributionBid)
class DistributionBidAdmin(admin.ModelAdmin):
    list_display = ("id", "asset", "creator", "bid_type", "quantity", "quantity_reserved", "status", "created_at")
    list_filter = ("status", "bid_type")
    search_fields = ("asset__title", "creator__email", "region")
    readonly_fields = ("quantity_reserved", "created_at", "updated_at")
    inlines = [DistributionAssignmentInline]


@admin.register(DistributionAssignment)
class DistributionAssignmentAdmin(admin.ModelAdmin):
    list_display = ("id", "bid", "retailer", "quantity", "status", "assigned_at")
    list_filter = ("status",)
    search_fields = ("retailer__email", "bid__asset__title")
