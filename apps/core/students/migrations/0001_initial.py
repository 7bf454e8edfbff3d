import django.db.models.deletion
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('academic_sessions', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='SchoolClass',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=40, unique=True)),
            ],
            options={
                'ordering': ['name'],
                'verbose_name_plural': 'school classes',
            },
        ),
        migrations.CreateModel(
            name='Student',
            fields=[
                ('id', models.CharField(max_length=40, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=150)),
                ('grade', models.CharField(max_length=40)),
                ('parent_name', models.CharField(max_length=150)),
                ('contact', models.CharField(max_length=30)),
                ('address', models.TextField(blank=True)),
                ('date_of_birth', models.DateField(blank=True, null=True)),
                ('admission_date', models.DateField(blank=True, null=True)),
                ('avatar', models.TextField(blank=True)),
                ('fee_structure_ids', models.JSONField(blank=True, default=list)),
                ('total_class_fees', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('back_fees', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('session', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='students', to='academic_sessions.academicsession')),
            ],
            options={
                'ordering': ['id'],
                'indexes': [models.Index(fields=['session', 'grade'], name='student_session_grade_idx')],
            },
        ),
    ]
