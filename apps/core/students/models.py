from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from apps.core.academic_sessions.models import AcademicSession
from apps.core.utils.managers import SessionScopedManager


class SchoolClass(models.Model):
    name = models.CharField(max_length=40, unique=True)  # e.g. 10th

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'school classes'

    def clean(self):
        super().clean()
        if self.name:
            self.name = self.name.strip()
        if not self.name:
            raise ValidationError({'name': 'Class name is required.'})

    def __str__(self):
        return self.name


class Student(models.Model):
    id = models.CharField(max_length=40, primary_key=True)  # e.g. ST001
    session = models.ForeignKey(AcademicSession, on_delete=models.PROTECT, related_name='students')
    objects = SessionScopedManager()

    name = models.CharField(max_length=150)
    grade = models.CharField(max_length=40)
    parent_name = models.CharField(max_length=150)
    contact = models.CharField(max_length=30)
    address = models.TextField(blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    admission_date = models.DateField(null=True, blank=True)
    avatar = models.TextField(blank=True)

    # Ordered; the first id is the primary fee line the total_class_fees override stands for.
    fee_structure_ids = models.JSONField(default=list, blank=True)
    total_class_fees = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    back_fees = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    class Meta:
        ordering = ['id']
        indexes = [
            models.Index(fields=['session', 'grade'], name='student_session_grade_idx'),
        ]

    def clean(self):
        super().clean()
        if self.name:
            self.name = self.name.strip()
        if not self.name:
            raise ValidationError({'name': 'Student name is required.'})

        if not isinstance(self.fee_structure_ids, list):
            raise ValidationError({'fee_structure_ids': 'Fee structure ids must be a list.'})
        self.fee_structure_ids = list(dict.fromkeys(str(fee_id) for fee_id in self.fee_structure_ids))

        if self.total_class_fees is not None and self.total_class_fees < 0:
            raise ValidationError({'total_class_fees': 'Total class fees cannot be negative.'})
        if self.back_fees is not None and self.back_fees < 0:
            raise ValidationError({'back_fees': 'Back fees cannot be negative.'})

    def __str__(self):
        return f"{self.id} - {self.name}"
