"""Serializers for the reservation API.

Input serializers only parse the request; business validation happens in
the command handlers so that every caller gets the same rules.
"""

from __future__ import annotations

from datetime import timedelta

from rest_framework import serializers  # type: ignore

from .domain.entities import BookingStatus

MAX_CALENDAR_DAYS = 366


class StayQuerySerializer(serializers.Serializer):
    property_id = serializers.IntegerField(min_value=1)
    check_in = serializers.DateField()
    check_out = serializers.DateField()


class QuoteQuerySerializer(StayQuerySerializer):
    guests = serializers.IntegerField(min_value=1, default=1)


class CalendarQuerySerializer(serializers.Serializer):
    start = serializers.DateField()
    end = serializers.DateField()

    def validate(self, attrs):  # type: ignore
        if attrs["end"] <= attrs["start"]:
            raise serializers.ValidationError({"end": "La date de fin doit être postérieure à la date de début."})
        if attrs["end"] - attrs["start"] > timedelta(days=MAX_CALENDAR_DAYS):
            raise serializers.ValidationError({"end": f"La période ne peut dépasser {MAX_CALENDAR_DAYS} jours."})
        return attrs


class ReservationCreateSerializer(serializers.Serializer):
    """Création d'une réservation."""

    property_id = serializers.IntegerField(min_value=1)
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    guests = serializers.IntegerField(default=1)
    guest_name = serializers.CharField(allow_blank=True, default="")
    guest_email = serializers.CharField(allow_blank=True, default="")
    guest_phone = serializers.CharField(allow_blank=True, default="")
    special_requests = serializers.CharField(required=False, allow_blank=True, default="")
    guest_id = serializers.IntegerField(required=False, allow_null=True, default=None)


class ReservationStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[s.value for s in BookingStatus])
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class ReservationSerializer(serializers.Serializer):
    """Détail d'une réservation (agrégat Reservation)."""

    booking_id = serializers.UUIDField(source="id")
    booking_code = serializers.CharField()
    property_id = serializers.ReadOnlyField()
    guest_id = serializers.ReadOnlyField()
    guest_name = serializers.CharField(source="guest.name")
    guest_email = serializers.CharField(source="guest.email")
    guest_phone = serializers.CharField(source="guest.phone")
    check_in = serializers.DateField(source="dates.start_date")
    check_out = serializers.DateField(source="dates.end_date")
    nights = serializers.IntegerField(source="dates.nights")
    guests = serializers.IntegerField(source="guests_count")
    status = serializers.CharField(source="status.value")
    payment_status = serializers.CharField(source="payment_status.value")
    total_price = serializers.IntegerField(source="pricing.total")
    currency = serializers.CharField(source="pricing.currency")
    pricing = serializers.SerializerMethodField()
    special_requests = serializers.CharField()
    cancellation_reason = serializers.CharField()

    def get_pricing(self, obj) -> dict:
        return obj.pricing.to_dict()
