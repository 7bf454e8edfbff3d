from django.db import models


DEFAULT_FEES_RECEIPT_TERMS = (
    '1. Fees once paid are not refundable.\n'
    '2. Please keep this receipt safely for future reference.\n'
    '3. Cheques are subject to realization.'
)

DEFAULT_SLIDER_IMAGES = [
    {
        'id': '1',
        'url': 'https://images.unsplash.com/photo-1562774053-701939374585?auto=format&fit=crop&w=1950&q=80',
        'title': 'Empowering Future Leaders',
        'subtitle': 'Excellence in Education Since 1995',
    },
    {
        'id': '2',
        'url': 'https://images.unsplash.com/photo-1523050854058-8df90110c9f1?auto=format&fit=crop&w=2000&q=80',
        'title': 'State-of-the-Art Library',
        'subtitle': 'Knowledge at your fingertips',
    },
    {
        'id': '3',
        'url': 'https://images.unsplash.com/photo-1509062522246-3755977927d7?auto=format&fit=crop&w=1950&q=80',
        'title': 'Modern Classrooms',
        'subtitle': 'Technology driven learning environment',
    },
]


def default_slider_images():
    return [dict(image) for image in DEFAULT_SLIDER_IMAGES]


class SchoolProfile(models.Model):
    """Single-row school identity plus the pointer to the session every view is scoped to."""

    SINGLETON_PK = 1

    name = models.CharField(max_length=255, default='The Education Hills')
    tagline = models.CharField(max_length=255, blank=True, default='Knowledge Is Power')
    address = models.TextField(blank=True, default='123 Academic Avenue, Knowledge City, ED 54321')
    website = models.CharField(max_length=255, blank=True, default='www.educationhills.edu')
    phone = models.CharField(max_length=30, blank=True, default='+1 (555) 123-4567')
    logo = models.TextField(blank=True)
    background_image = models.TextField(blank=True)
    affiliation = models.CharField(max_length=120, blank=True, default='CBSE Board')
    institution_type = models.CharField(max_length=60, blank=True, default='Co-Education')
    fees_receipt_terms = models.TextField(blank=True, default=DEFAULT_FEES_RECEIPT_TERMS)
    slider_images = models.JSONField(default=default_slider_images, blank=True)

    current_session = models.ForeignKey(
        'academic_sessions.AcademicSession',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='current_for_profiles',
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'school profile'

    @classmethod
    def load(cls):
        profile, _ = cls.objects.get_or_create(pk=cls.SINGLETON_PK)
        return profile

    @property
    def sessions(self):
        from apps.core.academic_sessions.models import AcademicSession

        return list(AcademicSession.objects.values_list('name', flat=True))

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_PK
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name
