import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('orders', '0001_initial'),
        ('outlets', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='table',
            name='current_order',
            field=models.ForeignKey(blank=True, help_text='The open order seated at this table, if any', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='orders.order'),
        ),
        migrations.AddConstraint(
            model_name='table',
            constraint=models.CheckConstraint(condition=models.Q(('current_order__isnull', True), ('status', 'OCCUPIED'), _connector='OR'), name='table_current_order_only_when_occupied'),
        ),
    ]
