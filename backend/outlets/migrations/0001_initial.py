"""
Initial migration for the outlets app.

Table.current_order points at orders.Order, which itself references
Table; that column is added in 0002 once the orders tables exist.
"""
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Outlet',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('code', models.CharField(help_text='Short unique code used on receipts and reports', max_length=32, unique=True)),
                ('tax_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Tax rate as a percentage of the subtotal (e.g., 5.00 for 5%)', max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0.00')), django.core.validators.MaxValueValidator(Decimal('100.00'))])),
                ('service_charge_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Service charge as a percentage of the subtotal', max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0.00')), django.core.validators.MaxValueValidator(Decimal('100.00'))])),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Table',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('table_number', models.CharField(max_length=20)),
                ('capacity', models.PositiveSmallIntegerField(default=4)),
                ('section', models.CharField(blank=True, max_length=50)),
                ('status', models.CharField(choices=[('AVAILABLE', 'Available'), ('OCCUPIED', 'Occupied'), ('RESERVED', 'Reserved'), ('CLEANING', 'Cleaning'), ('BLOCKED', 'Blocked')], db_index=True, default='AVAILABLE', max_length=20)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('outlet', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='tables', to='outlets.outlet')),
            ],
            options={
                'ordering': ['outlet', 'table_number'],
                'constraints': [
                    models.UniqueConstraint(fields=('outlet', 'table_number'), name='unique_table_number_per_outlet'),
                ],
            },
        ),
    ]
