"""
Initial migration for the payments app.
"""
from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('orders', '0001_initial'),
        ('shifts', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('method', models.CharField(choices=[('CASH', 'Cash'), ('CARD', 'Card'), ('OTHER', 'Other')], max_length=20)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('tip_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('processed_by', models.CharField(max_length=64)),
                ('card_last_four', models.CharField(blank=True, max_length=4)),
                ('card_type', models.CharField(blank=True, max_length=20)),
                ('transaction_reference', models.CharField(blank=True, max_length=100)),
                ('auth_code', models.CharField(blank=True, max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payments', to='orders.order')),
                ('shift', models.ForeignKey(blank=True, help_text='Shift whose drawer/terminal took this payment', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='payments', to='shifts.shift')),
                ('split_bill', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='payments', to='orders.splitbill')),
            ],
            options={
                'ordering': ['created_at'],
                'indexes': [
                    models.Index(fields=['order', 'created_at'], name='payments_pa_order_i_4d9364_idx'),
                ],
            },
        ),
    ]
