import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='PaymentEvent',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('reference_id', models.CharField(db_index=True, max_length=64)),
                ('kind', models.CharField(choices=[('reservation', 'Reservation'), ('membership', 'Membership')], max_length=12)),
                ('outcome', models.CharField(choices=[('success', 'Success'), ('failure', 'Failure'), ('pending', 'Pending')], max_length=10)),
                ('result', models.CharField(choices=[('applied', 'Applied'), ('duplicate', 'Duplicate (already in that state)'), ('rejected', 'Rejected (precondition failed)'), ('ignored', 'Ignored (already settled)'), ('not_found', 'No records for reference'), ('error', 'Error')], max_length=12)),
                ('source', models.CharField(choices=[('redirect', 'Browser redirect'), ('webhook', 'Processor notification'), ('expiry', 'Expiry sweep')], default='redirect', max_length=10)),
                ('payment_id', models.CharField(blank=True, max_length=64)),
                ('processor_status', models.CharField(blank=True, max_length=40)),
                ('payload', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Payment Event',
                'verbose_name_plural': 'Payment Events',
                'ordering': ['created_at'],
            },
        ),
    ]
