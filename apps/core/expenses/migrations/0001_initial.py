import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('academic_sessions', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Expense',
            fields=[
                ('id', models.CharField(max_length=40, primary_key=True, serialize=False)),
                ('category', models.CharField(choices=[('salaries', 'Salaries'), ('utilities', 'Utilities'), ('maintenance', 'Maintenance'), ('supplies', 'Supplies'), ('events', 'Events'), ('infrastructure', 'Infrastructure'), ('transport', 'Transport'), ('miscellaneous', 'Miscellaneous'), ('academics', 'Academics'), ('sports', 'Sports')], max_length=20)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('date', models.DateField(default=django.utils.timezone.localdate)),
                ('session', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='expenses', to='academic_sessions.academicsession')),
            ],
            options={
                'ordering': ['-date', '-id'],
                'indexes': [models.Index(fields=['session', 'date'], name='expense_session_date_idx')],
                'constraints': [models.CheckConstraint(condition=models.Q(('amount__gt', 0)), name='expense_amount_positive')],
            },
        ),
    ]
