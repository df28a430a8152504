"""
PATH: shipping/migrations/0001_initial.py

MIGRATION: CREATE courier tables
- ShippingParcel (one-to-one with orders.Order)
- Wilaya / Commune / StopDesk reference data (courier ids as PKs)
- CourierEvent webhook log
"""

from __future__ import annotations

from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="CourierEvent",
            fields=[
                ("id", models.CharField(max_length=128, primary_key=True, serialize=False)),
                ("type", models.CharField(max_length=64)),
                ("occurred_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("received_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-occurred_at"],
            },
        ),
        migrations.CreateModel(
            name="Wilaya",
            fields=[
                ("id", models.PositiveIntegerField(primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=120)),
                ("name_ar", models.CharField(blank=True, max_length=120, null=True)),
                ("slug", models.SlugField(max_length=160, unique=True)),
                ("zone", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("is_deliverable", models.BooleanField(default=True)),
                ("active", models.BooleanField(default=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Commune",
            fields=[
                ("id", models.PositiveIntegerField(primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=120)),
                ("name_ar", models.CharField(blank=True, max_length=120, null=True)),
                ("slug", models.SlugField(max_length=180, unique=True)),
                ("has_stop_desk", models.BooleanField(default=False)),
                ("is_deliverable", models.BooleanField(default=True)),
                ("delivery_time_parcel", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("delivery_time_payment", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("active", models.BooleanField(default=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "wilaya",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="communes",
                        to="shipping.wilaya",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["wilaya", "active"], name="shipping_co_wilaya__5e7f31_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StopDesk",
            fields=[
                ("id", models.PositiveIntegerField(primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=160)),
                ("name_ar", models.CharField(blank=True, max_length=160, null=True)),
                ("address", models.CharField(blank=True, default="", max_length=255)),
                ("slug", models.SlugField(max_length=220)),
                ("phone", models.CharField(blank=True, max_length=40, null=True)),
                (
                    "latitude",
                    models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True),
                ),
                (
                    "longitude",
                    models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True),
                ),
                ("active", models.BooleanField(default=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "commune",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stop_desks",
                        to="shipping.commune",
                    ),
                ),
                (
                    "wilaya",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stop_desks",
                        to="shipping.wilaya",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["wilaya", "active"], name="shipping_st_wilaya__8a2c44_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ShippingParcel",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("tracking", models.CharField(blank=True, max_length=64, null=True, unique=True)),
                ("label_url", models.URLField(blank=True, max_length=500, null=True)),
                ("status", models.CharField(blank=True, default="", max_length=64)),
                ("status_history", models.JSONField(blank=True, default=list)),
                ("last_status_check", models.DateTimeField(blank=True, null=True)),
                ("last_payload", models.JSONField(blank=True, default=dict)),
                ("courier_order_id", models.CharField(max_length=64)),
                ("firstname", models.CharField(max_length=100)),
                ("familyname", models.CharField(max_length=100)),
                ("contact_phone", models.CharField(max_length=40)),
                ("address", models.CharField(max_length=255)),
                ("to_wilaya_name", models.CharField(max_length=120)),
                ("to_commune_name", models.CharField(max_length=120)),
                ("product_list", models.TextField(blank=True, default="")),
                (
                    "price",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12),
                ),
                (
                    "weight",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True),
                ),
                ("height", models.PositiveIntegerField(blank=True, null=True)),
                ("width", models.PositiveIntegerField(blank=True, null=True)),
                ("length", models.PositiveIntegerField(blank=True, null=True)),
                ("is_stopdesk", models.BooleanField(default=False)),
                ("stopdesk_id", models.PositiveIntegerField(blank=True, null=True)),
                ("freeshipping", models.BooleanField(default=False)),
                ("has_exchange", models.BooleanField(default=False)),
                ("do_insurance", models.BooleanField(default=True)),
                ("from_wilaya_name", models.CharField(blank=True, default="", max_length=120)),
                ("from_address", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "order",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="parcel",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="shipping_sh_status_4c1e2a_idx"),
                    models.Index(
                        fields=["last_status_check"], name="shipping_sh_last_st_9d0b7e_idx"
                    ),
                ],
            },
        ),
    ]
