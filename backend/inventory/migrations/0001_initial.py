"""
Initial migration for the inventory app.

Creates stocked items, the append-only movement log, waste logs and the
purchase order / goods receipt documents. current_stock can never go
negative at the database level.
"""
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('outlets', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='InventoryItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('sku', models.CharField(max_length=50)),
                ('name', models.CharField(max_length=200)),
                ('unit_of_measure', models.CharField(default='unit', help_text='e.g. kg, l, unit', max_length=20)),
                ('opening_stock', models.DecimalField(decimal_places=3, default=Decimal('0.000'), help_text='Stock on hand when the item was first stocked', max_digits=14)),
                ('current_stock', models.DecimalField(decimal_places=3, default=Decimal('0.000'), max_digits=14)),
                ('reorder_point', models.DecimalField(decimal_places=3, default=Decimal('0.000'), help_text='Low-stock alert fires when stock falls to this level', max_digits=14)),
                ('average_cost', models.DecimalField(decimal_places=4, default=Decimal('0.0000'), help_text='Weighted average unit cost', max_digits=12)),
                ('last_cost', models.DecimalField(decimal_places=4, default=Decimal('0.0000'), help_text='Unit cost of the most recent receipt', max_digits=12)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('outlet', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='inventory_items', to='outlets.outlet')),
            ],
            options={
                'ordering': ['name'],
                'constraints': [
                    models.UniqueConstraint(fields=('outlet', 'sku'), name='unique_sku_per_outlet'),
                    models.CheckConstraint(condition=models.Q(('current_stock__gte', 0)), name='inventory_stock_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockMovement',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('movement_type', models.CharField(choices=[('ADJUSTMENT', 'Manual Adjustment'), ('WASTE', 'Waste'), ('PURCHASE_RECEIPT', 'Purchase Receipt'), ('STOCK_COUNT', 'Stock Count')], max_length=20)),
                ('quantity', models.DecimalField(decimal_places=3, help_text='Change in quantity (positive for additions, negative for removals)', max_digits=14)),
                ('previous_stock', models.DecimalField(decimal_places=3, max_digits=14)),
                ('new_stock', models.DecimalField(decimal_places=3, max_digits=14)),
                ('unit_cost', models.DecimalField(blank=True, decimal_places=4, max_digits=12, null=True)),
                ('total_cost', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('reference_type', models.CharField(blank=True, help_text='Document that caused the movement, e.g. WASTE_LOG', max_length=30)),
                ('reference_id', models.CharField(blank=True, max_length=100)),
                ('reason', models.CharField(max_length=255)),
                ('notes', models.TextField(blank=True)),
                ('performed_by', models.CharField(blank=True, max_length=64)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='inventory.inventoryitem')),
            ],
            options={
                'ordering': ['created_at'],
                'indexes': [
                    models.Index(fields=['item', 'created_at'], name='inventory_s_item_id_a9fe64_idx'),
                    models.Index(fields=['reference_type', 'reference_id'], name='inventory_s_referen_5aaa1a_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='WasteLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('reason', models.CharField(choices=[('EXPIRED', 'Expired'), ('SPOILED', 'Spoiled'), ('DAMAGED', 'Damaged'), ('PREPARATION', 'Preparation Error'), ('OTHER', 'Other')], max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('recorded_by', models.CharField(max_length=64)),
                ('total_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('outlet', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='waste_logs', to='outlets.outlet')),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='WasteLogItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=14)),
                ('unit_cost', models.DecimalField(decimal_places=4, max_digits=12)),
                ('total_cost', models.DecimalField(decimal_places=2, max_digits=14)),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='waste_lines', to='inventory.inventoryitem')),
                ('waste_log', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='inventory.wastelog')),
            ],
        ),
        migrations.CreateModel(
            name='PurchaseOrder',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('po_number', models.CharField(max_length=30)),
                ('supplier_name', models.CharField(max_length=200)),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('SENT', 'Sent'), ('PARTIALLY_RECEIVED', 'Partially Received'), ('RECEIVED', 'Received'), ('CANCELLED', 'Cancelled')], default='DRAFT', max_length=20)),
                ('created_by', models.CharField(blank=True, max_length=64)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('outlet', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='purchase_orders', to='outlets.outlet')),
            ],
            options={
                'ordering': ['-created_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('outlet', 'po_number'), name='unique_po_number_per_outlet'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PurchaseOrderItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('ordered_quantity', models.DecimalField(decimal_places=3, max_digits=14)),
                ('received_quantity', models.DecimalField(decimal_places=3, default=Decimal('0.000'), max_digits=14)),
                ('unit_cost', models.DecimalField(decimal_places=4, max_digits=12)),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='purchase_lines', to='inventory.inventoryitem')),
                ('purchase_order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='inventory.purchaseorder')),
            ],
            options={
                'constraints': [
                    models.UniqueConstraint(fields=('purchase_order', 'item'), name='unique_item_per_po'),
                ],
            },
        ),
        migrations.CreateModel(
            name='GoodsReceipt',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('grn_number', models.CharField(blank=True, max_length=30, unique=True)),
                ('received_by', models.CharField(max_length=64)),
                ('notes', models.TextField(blank=True)),
                ('total_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('received_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('purchase_order', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='receipts', to='inventory.purchaseorder')),
            ],
            options={
                'ordering': ['-received_at'],
            },
        ),
    ]
