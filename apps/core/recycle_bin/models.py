from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone


class TrashItem(models.Model):
    TYPE_STUDENT = 'STUDENT'
    TYPE_PAYMENT = 'PAYMENT'
    TYPE_EXPENSE = 'EXPENSE'
    TYPE_CHOICES = (
        (TYPE_STUDENT, 'Student'),
        (TYPE_PAYMENT, 'Payment'),
        (TYPE_EXPENSE, 'Expense'),
    )

    id = models.CharField(max_length=40, primary_key=True)
    item_type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    original_id = models.CharField(max_length=40)
    # Serialized row in Django's "python" serializer layout: {"model", "pk", "fields"}.
    data = models.JSONField(encoder=DjangoJSONEncoder)
    description = models.CharField(max_length=255)
    deleted_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-deleted_at', '-id']
        indexes = [
            models.Index(fields=['item_type', '-deleted_at'], name='trash_type_deleted_idx'),
            models.Index(fields=['item_type', 'original_id'], name='trash_type_original_idx'),
        ]

    def __str__(self):
        return self.description
