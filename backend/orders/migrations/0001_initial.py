"""
Initial migration for the orders app.

Creates the order aggregate (orders, items, discounts) and the split-bill
tables, with the partial unique index that keeps one OPEN order per table.
"""
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('menu', '0001_initial'),
        ('outlets', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('order_number', models.CharField(blank=True, max_length=30)),
                ('created_by', models.CharField(help_text='Employee who opened the order', max_length=64)),
                ('server', models.CharField(blank=True, help_text='Employee serving the table', max_length=64)),
                ('guest_count', models.PositiveSmallIntegerField(default=1)),
                ('order_type', models.CharField(choices=[('DINE_IN', 'Dine In'), ('TAKEAWAY', 'Takeaway')], default='DINE_IN', max_length=20)),
                ('status', models.CharField(choices=[('OPEN', 'Open'), ('CLOSED', 'Closed'), ('VOID', 'Void')], db_index=True, default='OPEN', max_length=20)),
                ('payment_status', models.CharField(choices=[('UNPAID', 'Unpaid'), ('PARTIALLY_PAID', 'Partially Paid'), ('PAID', 'Paid')], default='UNPAID', max_length=20)),
                ('subtotal', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('tax_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('service_charge', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('discount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('tip', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('notes', models.TextField(blank=True)),
                ('void_reason', models.CharField(blank=True, max_length=255)),
                ('voided_by', models.CharField(blank=True, max_length=64)),
                ('closed_by', models.CharField(blank=True, max_length=64)),
                ('opened_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('closed_at', models.DateTimeField(blank=True, null=True)),
                ('voided_at', models.DateTimeField(blank=True, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('outlet', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='outlets.outlet')),
                ('table', models.ForeignKey(blank=True, help_text='Seating table; optional for takeaway orders', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='outlets.table')),
            ],
            options={
                'ordering': ['-opened_at', 'order_number'],
                'indexes': [
                    models.Index(fields=['outlet', 'status'], name='orders_orde_outlet__eea040_idx'),
                    models.Index(fields=['outlet', 'opened_at'], name='orders_orde_outlet__c775e1_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('outlet', 'order_number'), name='unique_order_number_per_outlet'),
                    models.UniqueConstraint(condition=models.Q(('status', 'OPEN')), fields=('table',), name='one_open_order_per_table'),
                    models.CheckConstraint(condition=models.Q(('subtotal__gte', 0), ('tax_amount__gte', 0), ('service_charge__gte', 0), ('discount__gte', 0), ('tip__gte', 0), ('total__gte', 0)), name='order_money_non_negative'),
                    models.CheckConstraint(condition=models.Q(('discount__lte', models.F('subtotal'))), name='order_discount_within_subtotal'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrderItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(help_text='Menu item name at the time of ordering', max_length=200)),
                ('quantity', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('unit_price', models.DecimalField(decimal_places=2, help_text='Price copied from the menu when the item was ordered', max_digits=10)),
                ('total_price', models.DecimalField(decimal_places=2, help_text='unit_price * quantity', max_digits=12)),
                ('seat_number', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('course_number', models.PositiveSmallIntegerField(default=1)),
                ('course_type', models.CharField(choices=[('APPETIZER', 'Appetizer'), ('MAIN', 'Main'), ('DESSERT', 'Dessert'), ('BEVERAGE', 'Beverage')], default='MAIN', max_length=20)),
                ('modifiers', models.JSONField(blank=True, default=list)),
                ('special_instructions', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('SENT', 'Sent to Kitchen'), ('READY', 'Ready'), ('SERVED', 'Served'), ('VOID', 'Void')], db_index=True, default='PENDING', max_length=20)),
                ('is_void', models.BooleanField(default=False)),
                ('void_reason', models.CharField(blank=True, max_length=255)),
                ('voided_by', models.CharField(blank=True, max_length=64)),
                ('sent_to_kitchen_at', models.DateTimeField(blank=True, null=True)),
                ('prepared_at', models.DateTimeField(blank=True, null=True)),
                ('served_at', models.DateTimeField(blank=True, null=True)),
                ('voided_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('menu_item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='order_items', to='menu.menuitem')),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='orders.order')),
            ],
            options={
                'ordering': ['created_at'],
                'indexes': [
                    models.Index(fields=['order', 'is_void'], name='orders_orde_order_i_49e2b2_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrderDiscount',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('discount_type', models.CharField(choices=[('PERCENTAGE', 'Percentage'), ('FLAT', 'Flat Amount')], max_length=20)),
                ('value', models.DecimalField(decimal_places=2, help_text='Discount value (e.g., 15.00 for 15% or 15.00 flat)', max_digits=10)),
                ('amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Calculated discount amount as of the last recompute', max_digits=12)),
                ('reason', models.CharField(blank=True, max_length=255)),
                ('applied_by', models.CharField(max_length=64)),
                ('approved_by', models.CharField(blank=True, max_length=64)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='discounts', to='orders.order')),
            ],
            options={
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='SplitBill',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('split_number', models.PositiveSmallIntegerField()),
                ('split_type', models.CharField(choices=[('EQUAL', 'Equal'), ('BY_SEAT', 'By Seat'), ('BY_ITEM', 'By Item'), ('CUSTOM', 'Custom Amount')], max_length=20)),
                ('subtotal', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('tax_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('service_charge', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('discount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('tip', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('is_paid', models.BooleanField(default=False)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('is_void', models.BooleanField(default=False)),
                ('voided_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='split_bills', to='orders.order')),
            ],
            options={
                'ordering': ['order', 'split_number'],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_void', False)), fields=('order', 'split_number'), name='unique_active_split_number_per_order'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SplitBillItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('order_item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='split_memberships', to='orders.orderitem')),
                ('split_bill', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='orders.splitbill')),
            ],
            options={
                'ordering': ['split_bill', 'id'],
            },
        ),
    ]
