"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, ReservationAuditLog, ReservationLock


class ReservationAuditLogInline(admin.TabularInline):
    model = ReservationAuditLog
    extra = 0
    can_delete = False
    readonly_fields = ("action", "actor", "payload", "created_at")


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_code",
        "property",
        "guest_name",
        "status",
        "payment_status",
        "check_in",
        "check_out",
        "total_price",
        "currency",
        "created_at",
    )
    list_filter = ("status", "payment_status", "check_in", "check_out")
    search_fields = ("booking_code", "property__title", "guest_email", "guest_name")
    readonly_fields = (
        "booking_code",
        "created_at",
        "updated_at",
        "nightly_rate",
        "base_price",
        "discount",
        "service_fee",
        "cleaning_fee",
        "taxes",
        "total_price",
    )
    inlines = [ReservationAuditLogInline]


@admin.register(ReservationLock)
class ReservationLockAdmin(admin.ModelAdmin):
    list_display = ("property", "check_in", "check_out", "holder", "expires_at")
    list_filter = ("expires_at",)
    readonly_fields = ("token", "created_at")
