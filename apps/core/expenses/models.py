from django.db import models
from django.db.models import Q
from django.utils import timezone

from apps.core.academic_sessions.models import AcademicSession
from apps.core.utils.managers import SessionScopedManager


class Expense(models.Model):
    CATEGORY_SALARIES = 'salaries'
    CATEGORY_UTILITIES = 'utilities'
    CATEGORY_MAINTENANCE = 'maintenance'
    CATEGORY_SUPPLIES = 'supplies'
    CATEGORY_EVENTS = 'events'
    CATEGORY_INFRASTRUCTURE = 'infrastructure'
    CATEGORY_TRANSPORT = 'transport'
    CATEGORY_MISCELLANEOUS = 'miscellaneous'
    CATEGORY_ACADEMICS = 'academics'
    CATEGORY_SPORTS = 'sports'
    CATEGORY_CHOICES = (
        (CATEGORY_SALARIES, 'Salaries'),
        (CATEGORY_UTILITIES, 'Utilities'),
        (CATEGORY_MAINTENANCE, 'Maintenance'),
        (CATEGORY_SUPPLIES, 'Supplies'),
        (CATEGORY_EVENTS, 'Events'),
        (CATEGORY_INFRASTRUCTURE, 'Infrastructure'),
        (CATEGORY_TRANSPORT, 'Transport'),
        (CATEGORY_MISCELLANEOUS, 'Miscellaneous'),
        (CATEGORY_ACADEMICS, 'Academics'),
        (CATEGORY_SPORTS, 'Sports'),
    )

    id = models.CharField(max_length=40, primary_key=True)
    session = models.ForeignKey(AcademicSession, on_delete=models.PROTECT, related_name='expenses')
    objects = SessionScopedManager()

    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    description = models.CharField(max_length=255, blank=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    date = models.DateField(default=timezone.localdate)

    class Meta:
        ordering = ['-date', '-id']
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name='expense_amount_positive',
            ),
        ]
        indexes = [
            models.Index(fields=['session', 'date'], name='expense_session_date_idx'),
        ]

    def __str__(self):
        return f"{self.get_category_display()} - {self.amount}"
