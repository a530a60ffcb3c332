import apps.properties.models
import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Property",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("address", models.CharField(blank=True, max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[("available", "Disponible"), ("unavailable", "Indisponible")],
                        default="available",
                        max_length=20,
                    ),
                ),
                ("nightly_price", models.PositiveIntegerField(help_text="Prix par nuit, en centimes.")),
                ("cleaning_fee", models.PositiveIntegerField(default=0, help_text="Frais de ménage, en centimes.")),
                (
                    "service_fee_rate",
                    models.DecimalField(
                        decimal_places=4,
                        default=apps.properties.models._default_service_fee_rate,
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("1")),
                        ],
                    ),
                ),
                (
                    "tax_rate",
                    models.DecimalField(
                        decimal_places=4,
                        default=apps.properties.models._default_tax_rate,
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("1")),
                        ],
                    ),
                ),
                (
                    "weekly_discount_rate",
                    models.DecimalField(
                        decimal_places=4,
                        default=Decimal("0"),
                        help_text="Remise appliquée à partir de 7 nuits.",
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("1")),
                        ],
                    ),
                ),
                (
                    "monthly_discount_rate",
                    models.DecimalField(
                        decimal_places=4,
                        default=Decimal("0"),
                        help_text="Remise appliquée à partir de 28 nuits.",
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("1")),
                        ],
                    ),
                ),
                ("currency", models.CharField(default=apps.properties.models._default_currency, max_length=3)),
                (
                    "max_guests",
                    models.PositiveSmallIntegerField(
                        default=2, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                (
                    "minimum_stay",
                    models.PositiveSmallIntegerField(
                        default=1, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                (
                    "maximum_stay",
                    models.PositiveSmallIntegerField(
                        blank=True, null=True, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="properties",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Loft",
                "verbose_name_plural": "Lofts",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="properties__status_7d1e4c_idx"),
                    models.Index(fields=["owner", "status"], name="properties__owner_i_5b9a2f_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AvailabilityBlock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_date", models.DateField()),
                ("end_date", models.DateField(help_text="Date de fin exclue.")),
                (
                    "reason",
                    models.CharField(
                        choices=[
                            ("maintenance", "Maintenance"),
                            ("renovation", "Rénovation"),
                            ("manual_block", "Blocage manuel"),
                            ("pricing_rule", "Règle tarifaire"),
                        ],
                        default="manual_block",
                        max_length=20,
                    ),
                ),
                ("is_available", models.BooleanField(default=False)),
                (
                    "price_override",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Prix par nuit remplaçant le tarif de base, en centimes.",
                        null=True,
                    ),
                ),
                (
                    "minimum_stay",
                    models.PositiveSmallIntegerField(
                        blank=True, null=True, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                ("note", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_availability_blocks",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "property",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="availability_blocks",
                        to="properties.property",
                    ),
                ),
            ],
            options={
                "verbose_name": "Période de disponibilité",
                "verbose_name_plural": "Périodes de disponibilité",
                "ordering": ["start_date"],
                "indexes": [
                    models.Index(
                        fields=["property", "start_date", "end_date"], name="properties__propert_3c8e1a_idx"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(end_date__gt=models.F("start_date")),
                        name="availability_block_valid_dates",
                    ),
                ],
            },
        ),
    ]
