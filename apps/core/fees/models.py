from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from apps.core.academic_sessions.models import AcademicSession
from apps.core.students.models import Student
from apps.core.utils.managers import SessionScopedManager


class FeeStructure(models.Model):
    id = models.CharField(max_length=40, primary_key=True)  # e.g. F_CLASS
    session = models.ForeignKey(AcademicSession, on_delete=models.PROTECT, related_name='fee_structures')
    objects = SessionScopedManager()

    name = models.CharField(max_length=120)  # e.g. Class fees
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    due_date = models.DateField(null=True, blank=True)

    class Meta:
        ordering = ['name', 'id']
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gte=0),
                name='fee_structure_amount_non_negative',
            ),
        ]

    def clean(self):
        super().clean()
        if self.name:
            self.name = self.name.strip()
        if not self.name:
            raise ValidationError({'name': 'Fee structure name is required.'})

    def __str__(self):
        return f"{self.name} ({self.session})"


class PaymentRecord(models.Model):
    METHOD_CASH = 'CASH'
    METHOD_UPI = 'UPI'
    METHOD_ONLINE = 'ONLINE'
    METHOD_CHEQUE = 'CHEQUE'
    METHOD_CHOICES = (
        (METHOD_CASH, 'Cash'),
        (METHOD_UPI, 'UPI'),
        (METHOD_ONLINE, 'Online Transfer'),
        (METHOD_CHEQUE, 'Cheque'),
    )

    id = models.CharField(max_length=40, primary_key=True)
    session = models.ForeignKey(AcademicSession, on_delete=models.PROTECT, related_name='payments')
    objects = SessionScopedManager()

    # No database constraint: a payment keeps pointing at a student or fee
    # structure that currently sits in the recycle bin.
    student = models.ForeignKey(
        Student,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name='payments',
    )
    fee_structure = models.ForeignKey(
        FeeStructure,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name='payments',
    )
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2)
    date = models.DateField(default=timezone.localdate)
    method = models.CharField(max_length=20, choices=METHOD_CHOICES, default=METHOD_CASH)

    class Meta:
        ordering = ['-date', '-id']
        constraints = [
            models.CheckConstraint(
                condition=Q(amount_paid__gt=0),
                name='payment_amount_positive',
            ),
        ]
        indexes = [
            models.Index(fields=['session', 'date'], name='payment_session_date_idx'),
            models.Index(fields=['student', 'fee_structure'], name='payment_student_fee_idx'),
        ]

    def __str__(self):
        return f"{self.id} - {self.student_id} - {self.amount_paid}"
