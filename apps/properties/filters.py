"""FilterSet definitions for property listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Property


class PropertyFilterSet(django_filters.FilterSet):
    """Filters used by the public loft listing."""

    status = django_filters.ChoiceFilter(choices=Property.Status.choices)
    price_min = django_filters.NumberFilter(field_name="nightly_price", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="nightly_price", lookup_expr="lte")
    guests = django_filters.NumberFilter(field_name="max_guests", lookup_expr="gte")
    owner = django_filters.NumberFilter(field_name="owner_id")

    class Meta:
        model = Property
        fields = ["status", "currency"]
