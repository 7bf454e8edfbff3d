import apps.core.schools.models
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('academic_sessions', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='SchoolProfile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(default='The Education Hills', max_length=255)),
                ('tagline', models.CharField(blank=True, default='Knowledge Is Power', max_length=255)),
                ('address', models.TextField(blank=True, default='123 Academic Avenue, Knowledge City, ED 54321')),
                ('website', models.CharField(blank=True, default='www.educationhills.edu', max_length=255)),
                ('phone', models.CharField(blank=True, default='+1 (555) 123-4567', max_length=30)),
                ('logo', models.TextField(blank=True)),
                ('background_image', models.TextField(blank=True)),
                ('affiliation', models.CharField(blank=True, default='CBSE Board', max_length=120)),
                ('institution_type', models.CharField(blank=True, default='Co-Education', max_length=60)),
                ('fees_receipt_terms', models.TextField(blank=True, default='1. Fees once paid are not refundable.\n2. Please keep this receipt safely for future reference.\n3. Cheques are subject to realization.')),
                ('slider_images', models.JSONField(blank=True, default=apps.core.schools.models.default_slider_images)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('current_session', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='current_for_profiles', to='academic_sessions.academicsession')),
            ],
            options={
                'verbose_name': 'school profile',
            },
        ),
    ]
