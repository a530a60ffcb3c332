"""Serializers for the properties domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import AvailabilityBlock, Property


class AvailabilityBlockSerializer(serializers.ModelSerializer):
    class Meta:
        model = AvailabilityBlock
        fields = [
            "id",
            "start_date",
            "end_date",
            "reason",
            "is_available",
            "price_override",
            "minimum_stay",
            "note",
        ]
        read_only_fields = fields


class PropertySerializer(serializers.ModelSerializer):
    owner_id = serializers.ReadOnlyField(source="owner.id")

    class Meta:
        model = Property
        fields = [
            "id",
            "owner_id",
            "title",
            "description",
            "address",
            "status",
            "nightly_price",
            "cleaning_fee",
            "service_fee_rate",
            "tax_rate",
            "weekly_discount_rate",
            "monthly_discount_rate",
            "currency",
            "max_guests",
            "minimum_stay",
            "maximum_stay",
        ]
        read_only_fields = fields
