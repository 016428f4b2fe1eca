# deliveries/admin.py

from django.contrib import admin

from deliveries.models import CourierAssignment, Delivery


class CourierAssignmentInline(admin.TabularInline):
    model = CourierAssignment
    extra = 0
    fields = ("courier", "status", "created_at")
    readonly_fields = ("created_at",)


@admin.register(Delivery)
class DeliveryAdmin(admin.ModelAdmin):
    list_display = ("id", "asset", "sender", "status", "created_at", "delivered_at")
    list_filter = ("status",)
    search_fields = ("sender__email", "recipient_pubkey", "asset__title")
    readonly_fields = ("encrypted_label", "created_at", "updated_at", "delivered_at")
    inlines = [CourierAssignmentInline]


@admin.register(CourierAssignment)
class CourierAssignmentAdmin(admin.ModelAdmin):
    list_display = ("delivery", "courier", "status", "created_at")
    list_filter = ("status",)
