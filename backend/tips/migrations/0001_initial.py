"""
Initial migration for the tips app.
"""
import django.db.models.deletion
from django.db import migrations, models
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('outlets', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='TipPool',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('date', models.DateField()),
                ('shift_type', models.CharField(blank=True, help_text='e.g. LUNCH, DINNER', max_length=30)),
                ('total_tips', models.DecimalField(decimal_places=2, max_digits=12)),
                ('status', models.CharField(choices=[('DISTRIBUTED', 'Distributed')], default='DISTRIBUTED', max_length=20)),
                ('created_by', models.CharField(blank=True, max_length=64)),
                ('distributed_at', models.DateTimeField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('outlet', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='tip_pools', to='outlets.outlet')),
            ],
            options={
                'ordering': ['-date', '-created_at'],
                'indexes': [
                    models.Index(fields=['outlet', 'date'], name='tips_tippoo_outlet__e02866_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TipAllocation',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('employee_id', models.CharField(max_length=64)),
                ('share_percent', models.DecimalField(blank=True, decimal_places=3, max_digits=6, null=True)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('tip_pool', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='allocations', to='tips.tippool')),
            ],
            options={
                'ordering': ['employee_id'],
                'constraints': [
                    models.UniqueConstraint(fields=('tip_pool', 'employee_id'), name='one_allocation_per_employee'),
                ],
            },
        ),
    ]
