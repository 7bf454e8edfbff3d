import django.core.serializers.json
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='TrashItem',
            fields=[
                ('id', models.CharField(max_length=40, primary_key=True, serialize=False)),
                ('item_type', models.CharField(choices=[('STUDENT', 'Student'), ('PAYMENT', 'Payment'), ('EXPENSE', 'Expense')], max_length=10)),
                ('original_id', models.CharField(max_length=40)),
                ('data', models.JSONField(encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('description', models.CharField(max_length=255)),
                ('deleted_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'ordering': ['-deleted_at', '-id'],
                'indexes': [models.Index(fields=['item_type', '-deleted_at'], name='trash_type_deleted_idx'), models.Index(fields=['item_type', 'original_id'], name='trash_type_original_idx')],
            },
        ),
    ]
