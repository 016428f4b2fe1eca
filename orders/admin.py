# orders/admin.py

from django.contrib import admin

from orders.models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "kind", "amount", "currency", "payment_status", "created_at", "paid_at")
    list_filter = ("kind", "payment_status")
    search_fields = ("user__email", "asset__title")
    readonly_fields = ("created_at", "updated_at", "paid_at")
