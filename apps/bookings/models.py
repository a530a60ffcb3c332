"""Booking models for Loft Algérie.

A ``Booking`` row is the persisted form of the ``Reservation`` aggregate;
prices are frozen in minor currency units at creation time. Pending and
confirmed bookings occupy the calendar, cancelled and completed ones do not.
"""

from __future__ import annotations

import uuid

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class BookingQuerySet(models.QuerySet):
    def blocking(self):
        return self.filter(status__in=Booking.BLOCKING_STATUSES)

    def overlapping(self, check_in, check_out):
        return self.filter(check_in__lt=check_out, check_out__gt=check_in)


class Booking(models.Model):
    """Réservation d'un loft."""

    class Status(models.TextChoices):
        PENDING = "pending", _("En attente de confirmation")
        CONFIRMED = "confirmed", _("Confirmée")
        CANCELLED = "cancelled", _("Annulée")
        COMPLETED = "completed", _("Terminée")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("En attente de paiement")
        PAID = "paid", _("Payée")
        REFUNDED = "refunded", _("Remboursée")
        FAILED = "failed", _("Échec du paiement")

    BLOCKING_STATUSES = (Status.PENDING, Status.CONFIRMED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking_code = models.CharField(max_length=12, unique=True, editable=False)
    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    guest = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
    )
    guest_name = models.CharField(max_length=255)
    guest_email = models.EmailField()
    guest_phone = models.CharField(max_length=32)
    check_in = models.DateField()
    check_out = models.DateField(help_text=_("Date de départ exclue."))
    guests_count = models.PositiveSmallIntegerField(default=1)
    nightly_rate = models.PositiveIntegerField(default=0)
    base_price = models.PositiveIntegerField(default=0)
    discount = models.PositiveIntegerField(default=0)
    service_fee = models.PositiveIntegerField(default=0)
    cleaning_fee = models.PositiveIntegerField(default=0)
    taxes = models.PositiveIntegerField(default=0)
    total_price = models.PositiveIntegerField(default=0, help_text=_("Montant total, en centimes."))
    currency = models.CharField(max_length=3, default="DZD")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    special_requests = models.TextField(blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Réservation")
        verbose_name_plural = _("Réservations")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "check_in", "check_out"], name="bookings_bo_propert_8f2b1d_idx"),
            models.Index(fields=["status"], name="bookings_bo_status_4a6c0e_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.booking_code} for {self.property_id}"


class ReservationLockQuerySet(models.QuerySet):
    def overlapping(self, property_id, check_in, check_out):
        return self.filter(property_id=property_id, check_in__lt=check_out, check_out__gt=check_in)

    def expired(self, now=None):
        return self.filter(expires_at__lt=now or timezone.now())

    def active(self, now=None):
        return self.filter(expires_at__gte=now or timezone.now())


class ReservationLock(models.Model):
    """Short-lived hold on a date range while a reservation is being created."""

    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="reservation_locks",
    )
    check_in = models.DateField()
    check_out = models.DateField()
    token = models.CharField(max_length=64, unique=True)
    expires_at = models.DateTimeField()
    holder = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reservation_locks",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ReservationLockQuerySet.as_manager()

    class Meta:
        verbose_name = _("Verrou de réservation")
        verbose_name_plural = _("Verrous de réservation")
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="reservation_lock_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "check_in", "check_out"], name="bookings_re_propert_2d7e9a_idx"),
            models.Index(fields=["expires_at"], name="bookings_re_expires_6b3f1c_idx"),
        ]

    def __str__(self) -> str:
        return f"Lock {self.property_id} {self.check_in} → {self.check_out}"


class ReservationAuditLog(models.Model):
    """Append-only trail of what happened to a booking."""

    class Action(models.TextChoices):
        CREATED = "created", _("Créée")
        CONFIRMED = "confirmed", _("Confirmée")
        CANCELLED = "cancelled", _("Annulée")
        COMPLETED = "completed", _("Terminée")

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="audit_logs")
    action = models.CharField(max_length=20, choices=Action.choices)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reservation_audit_logs",
    )
    payload = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Journal de réservation")
        verbose_name_plural = _("Journaux de réservation")
        ordering = ["created_at"]

    def __str__(self) -> str:
        return f"{self.booking_id}: {self.action}"
