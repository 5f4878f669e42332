"""
Initial migration for the menu app.
"""
from decimal import Decimal

import django.core.validators
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
            name='MenuItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('default_course_type', models.CharField(default='MAIN', help_text='Course an order item of this dish starts in', max_length=20)),
                ('is_available', models.BooleanField(default=True)),
                ('outlet', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='menu_items', to='outlets.outlet')),
            ],
            options={
                'ordering': ['name'],
            },
        ),
    ]
