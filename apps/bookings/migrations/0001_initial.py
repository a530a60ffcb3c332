import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models

OVERLAP_GUARDS = (
    (
        "bookings_booking",
        "booking_no_overlap",
        "EXCLUDE USING gist (property_id WITH =, daterange(check_in, check_out) WITH &&) "
        "WHERE (status IN ('pending', 'confirmed'))",
    ),
    (
        "bookings_reservationlock",
        "reservation_lock_no_overlap",
        "EXCLUDE USING gist (property_id WITH =, daterange(check_in, check_out) WITH &&)",
    ),
)


def add_overlap_guards(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    schema_editor.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    for table, name, definition in OVERLAP_GUARDS:
        schema_editor.execute(f"ALTER TABLE {table} ADD CONSTRAINT {name} {definition}")


def drop_overlap_guards(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    for table, name, _definition in OVERLAP_GUARDS:
        schema_editor.execute(f"ALTER TABLE {table} DROP CONSTRAINT IF EXISTS {name}")


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("properties", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("booking_code", models.CharField(editable=False, max_length=12, unique=True)),
                ("guest_name", models.CharField(max_length=255)),
                ("guest_email", models.EmailField(max_length=254)),
                ("guest_phone", models.CharField(max_length=32)),
                ("check_in", models.DateField()),
                ("check_out", models.DateField(help_text="Date de départ exclue.")),
                ("guests_count", models.PositiveSmallIntegerField(default=1)),
                ("nightly_rate", models.PositiveIntegerField(default=0)),
                ("base_price", models.PositiveIntegerField(default=0)),
                ("discount", models.PositiveIntegerField(default=0)),
                ("service_fee", models.PositiveIntegerField(default=0)),
                ("cleaning_fee", models.PositiveIntegerField(default=0)),
                ("taxes", models.PositiveIntegerField(default=0)),
                ("total_price", models.PositiveIntegerField(default=0, help_text="Montant total, en centimes.")),
                ("currency", models.CharField(default="DZD", max_length=3)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "En attente de confirmation"),
                            ("confirmed", "Confirmée"),
                            ("cancelled", "Annulée"),
                            ("completed", "Terminée"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("pending", "En attente de paiement"),
                            ("paid", "Payée"),
                            ("refunded", "Remboursée"),
                            ("failed", "Échec du paiement"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("special_requests", models.TextField(blank=True)),
                ("cancellation_reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "guest",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="bookings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "property",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="properties.property",
                    ),
                ),
            ],
            options={
                "verbose_name": "Réservation",
                "verbose_name_plural": "Réservations",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["property", "check_in", "check_out"], name="bookings_bo_propert_8f2b1d_idx"),
                    models.Index(fields=["status"], name="bookings_bo_status_4a6c0e_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(check_out__gt=models.F("check_in")),
                        name="booking_valid_dates",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReservationLock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("check_in", models.DateField()),
                ("check_out", models.DateField()),
                ("token", models.CharField(max_length=64, unique=True)),
                ("expires_at", models.DateTimeField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "holder",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reservation_locks",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "property",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reservation_locks",
                        to="properties.property",
                    ),
                ),
            ],
            options={
                "verbose_name": "Verrou de réservation",
                "verbose_name_plural": "Verrous de réservation",
                "indexes": [
                    models.Index(fields=["property", "check_in", "check_out"], name="bookings_re_propert_2d7e9a_idx"),
                    models.Index(fields=["expires_at"], name="bookings_re_expires_6b3f1c_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(check_out__gt=models.F("check_in")),
                        name="reservation_lock_valid_dates",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReservationAuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("created", "Créée"),
                            ("confirmed", "Confirmée"),
                            ("cancelled", "Annulée"),
                            ("completed", "Terminée"),
                        ],
                        max_length=20,
                    ),
                ),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reservation_audit_logs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="audit_logs",
                        to="bookings.booking",
                    ),
                ),
            ],
            options={
                "verbose_name": "Journal de réservation",
                "verbose_name_plural": "Journaux de réservation",
                "ordering": ["created_at"],
            },
        ),
        migrations.RunPython(add_overlap_guards, drop_overlap_guards),
    ]
