"""Property domain models for Loft Algérie.

Amounts are stored as integers in minor currency units (centimes) so that
prices never pick up floating point drift between the quote shown to a
guest and the total persisted on the booking.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

RATE_VALIDATORS = [MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))]


def _default_service_fee_rate() -> Decimal:
    return Decimal(getattr(settings, "DEFAULT_SERVICE_FEE_RATE", "0.05"))


def _default_tax_rate() -> Decimal:
    return Decimal(getattr(settings, "DEFAULT_TAX_RATE", "0.19"))


def _default_currency() -> str:
    return getattr(settings, "DEFAULT_CURRENCY", "DZD")


class Property(models.Model):
    """A loft rented by the night."""

    class Status(models.TextChoices):
        AVAILABLE = "available", _("Disponible")
        UNAVAILABLE = "unavailable", _("Indisponible")

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="properties",
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    address = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.AVAILABLE)
    nightly_price = models.PositiveIntegerField(help_text=_("Prix par nuit, en centimes."))
    cleaning_fee = models.PositiveIntegerField(default=0, help_text=_("Frais de ménage, en centimes."))
    service_fee_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=_default_service_fee_rate,
        validators=RATE_VALIDATORS,
    )
    tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=_default_tax_rate,
        validators=RATE_VALIDATORS,
    )
    weekly_discount_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal("0"),
        validators=RATE_VALIDATORS,
        help_text=_("Remise appliquée à partir de 7 nuits."),
    )
    monthly_discount_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal("0"),
        validators=RATE_VALIDATORS,
        help_text=_("Remise appliquée à partir de 28 nuits."),
    )
    currency = models.CharField(max_length=3, default=_default_currency)
    max_guests = models.PositiveSmallIntegerField(default=2, validators=[MinValueValidator(1)])
    minimum_stay = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    maximum_stay = models.PositiveSmallIntegerField(null=True, blank=True, validators=[MinValueValidator(1)])
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Loft")
        verbose_name_plural = _("Lofts")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="properties__status_7d1e4c_idx"),
            models.Index(fields=["owner", "status"], name="properties__owner_i_5b9a2f_idx"),
        ]

    def __str__(self) -> str:
        return self.title

    @property
    def is_bookable(self) -> bool:
        return self.status == self.Status.AVAILABLE


class AvailabilityBlock(models.Model):
    """Owner or admin imposed calendar entry for a property.

    Rows with ``is_available=False`` exclude the period from booking exactly
    like a booking does. Rows with ``is_available=True`` only carry a price
    override or a minimum stay for the nights they cover.
    """

    class Reason(models.TextChoices):
        MAINTENANCE = "maintenance", _("Maintenance")
        RENOVATION = "renovation", _("Rénovation")
        MANUAL_BLOCK = "manual_block", _("Blocage manuel")
        PRICING_RULE = "pricing_rule", _("Règle tarifaire")

    property = models.ForeignKey(
        Property,
        on_delete=models.CASCADE,
        related_name="availability_blocks",
    )
    start_date = models.DateField()
    end_date = models.DateField(help_text=_("Date de fin exclue."))
    reason = models.CharField(max_length=20, choices=Reason.choices, default=Reason.MANUAL_BLOCK)
    is_available = models.BooleanField(default=False)
    price_override = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Prix par nuit remplaçant le tarif de base, en centimes."),
    )
    minimum_stay = models.PositiveSmallIntegerField(null=True, blank=True, validators=[MinValueValidator(1)])
    note = models.CharField(max_length=255, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_availability_blocks",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Période de disponibilité")
        verbose_name_plural = _("Périodes de disponibilité")
        ordering = ["start_date"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="availability_block_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "start_date", "end_date"], name="properties__propert_3c8e1a_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.property.title}: {self.start_date} → {self.end_date} ({self.reason})"
