"""Tests for loft listing and details."""

from __future__ import annotations

from datetime import date

from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.properties.models import AvailabilityBlock, Property
from apps.users.models import User
from apps.users.roles import Role


class PropertyAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(
            email="partner@example.dz",
            phone="+213555000010",
            password="StrongPass123",
            role=Role.PARTNER,
        )
        self.property = Property.objects.create(
            owner=self.owner,
            title="Loft Hydra",
            description="Loft lumineux sur les hauteurs d'Alger",
            address="Hydra, Alger",
            nightly_price=12000,
            cleaning_fee=2500,
            max_guests=3,
        )
        self.closed = Property.objects.create(
            owner=self.owner,
            title="Loft Annaba",
            nightly_price=7000,
            max_guests=6,
            status=Property.Status.UNAVAILABLE,
        )

    def test_list_properties(self) -> None:
        response = self.client.get(reverse("property-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["count"], 2)

    def test_filter_by_status_price_and_guests(self) -> None:
        response = self.client.get(reverse("property-list"), {"status": "available"})
        self.assertEqual([p["title"] for p in response.data["results"]], ["Loft Hydra"])

        response = self.client.get(reverse("property-list"), {"price_max": 8000})
        self.assertEqual([p["title"] for p in response.data["results"]], ["Loft Annaba"])

        response = self.client.get(reverse("property-list"), {"guests": 5})
        self.assertEqual([p["title"] for p in response.data["results"]], ["Loft Annaba"])

    def test_property_detail(self) -> None:
        response = self.client.get(reverse("property-detail", args=[self.property.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["nightly_price"], 12000)
        self.assertEqual(response.data["service_fee_rate"], "0.0500")
        self.assertEqual(response.data["tax_rate"], "0.1900")
        self.assertEqual(response.data["currency"], "DZD")

    def test_property_blocks(self) -> None:
        AvailabilityBlock.objects.create(
            property=self.property,
            start_date=date(2026, 7, 1),
            end_date=date(2026, 7, 4),
            reason=AvailabilityBlock.Reason.RENOVATION,
        )
        AvailabilityBlock.objects.create(
            property=self.property,
            start_date=date(2026, 9, 1),
            end_date=date(2026, 9, 2),
        )

        response = self.client.get(
            reverse("property-blocks", args=[self.property.id]),
            {"start": "2026-06-01", "end": "2026-08-01"},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["reason"], "renovation")

    def test_is_bookable(self) -> None:
        self.assertTrue(self.property.is_bookable)
        self.assertFalse(self.closed.is_bookable)

    @override_settings(DEFAULT_CURRENCY="EUR")
    def test_currency_defaults_to_configured_currency(self) -> None:
        loft = Property.objects.create(owner=self.owner, title="Loft Oran", nightly_price=9000)
        self.assertEqual(loft.currency, "EUR")
        self.assertEqual(self.property.currency, "DZD")
