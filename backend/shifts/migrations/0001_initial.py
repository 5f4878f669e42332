"""
Initial migration for the shifts app.

The two partial unique indexes allow at most one OPEN shift per employee
and per terminal.
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
        ('terminals', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Shift',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('employee_id', models.CharField(db_index=True, max_length=64)),
                ('status', models.CharField(choices=[('OPEN', 'Open'), ('CLOSED', 'Closed'), ('RECONCILED', 'Reconciled')], db_index=True, default='OPEN', max_length=20)),
                ('opening_float', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('closing_float', models.DecimalField(blank=True, decimal_places=2, default=None, max_digits=12, null=True)),
                ('cash_sales', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('card_sales', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('other_sales', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('total_sales', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('total_tax', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('total_discount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('total_tips', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('actual_cash', models.DecimalField(blank=True, decimal_places=2, default=None, help_text='Cash counted at close', max_digits=12, null=True)),
                ('expected_cash', models.DecimalField(blank=True, decimal_places=2, default=None, max_digits=12, null=True)),
                ('variance', models.DecimalField(blank=True, decimal_places=2, default=None, max_digits=12, null=True)),
                ('start_time', models.DateTimeField(default=django.utils.timezone.now)),
                ('end_time', models.DateTimeField(blank=True, null=True)),
                ('closed_by', models.CharField(blank=True, max_length=64)),
                ('notes', models.TextField(blank=True)),
                ('outlet', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='shifts', to='outlets.outlet')),
                ('terminal', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='shifts', to='terminals.terminal')),
            ],
            options={
                'ordering': ['-start_time'],
                'indexes': [
                    models.Index(fields=['outlet', 'start_time'], name='shifts_shif_outlet__c1e2e9_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status', 'OPEN')), fields=('employee_id',), name='one_open_shift_per_employee'),
                    models.UniqueConstraint(condition=models.Q(('status', 'OPEN')), fields=('terminal',), name='one_open_shift_per_terminal'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CashDrop',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('reason', models.CharField(blank=True, max_length=255)),
                ('dropped_by', models.CharField(blank=True, max_length=64)),
                ('dropped_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('shift', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='cash_drops', to='shifts.shift')),
            ],
            options={
                'ordering': ['dropped_at'],
            },
        ),
    ]
