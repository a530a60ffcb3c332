"""Admin registration for properties."""

from __future__ import annotations

from django.contrib import admin

from .models import AvailabilityBlock, Property


class AvailabilityBlockInline(admin.TabularInline):
    model = AvailabilityBlock
    extra = 0
    fields = ("start_date", "end_date", "reason", "is_available", "price_override", "minimum_stay", "note")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ("title", "owner", "status", "nightly_price", "currency", "max_guests", "created_at")
    list_filter = ("status", "currency")
    search_fields = ("title", "address", "owner__email")
    readonly_fields = ("created_at", "updated_at")
    inlines = [AvailabilityBlockInline]


@admin.register(AvailabilityBlock)
class AvailabilityBlockAdmin(admin.ModelAdmin):
    list_display = ("property", "start_date", "end_date", "reason", "is_available", "price_override")
    list_filter = ("reason", "is_available")
    search_fields = ("property__title", "note")
