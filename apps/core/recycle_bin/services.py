import json
import logging

from django.conf import settings
from django.core import serializers
from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction

from apps.core.academic_sessions.models import AcademicSession
from apps.core.expenses.models import Expense
from apps.core.fees.models import PaymentRecord
from apps.core.students.models import Student
from apps.core.utils.ids import trash_ids as default_trash_ids
from apps.core.utils.values import format_amount

from .models import TrashItem

logger = logging.getLogger(__name__)

TRASH_TYPES = {
    Student: TrashItem.TYPE_STUDENT,
    PaymentRecord: TrashItem.TYPE_PAYMENT,
    Expense: TrashItem.TYPE_EXPENSE,
}
TRASH_MODELS = {item_type: model for model, item_type in TRASH_TYPES.items()}


def snapshot(instance):
    """JSON-ready copy of the row; restoring it rebuilds every field value.

    The session is stored by its label, so a row stays restorable when its
    session is deleted and later re-added under the same name.
    """
    data = serializers.serialize('python', [instance], use_natural_foreign_keys=True)[0]
    return json.loads(json.dumps(data, cls=DjangoJSONEncoder))


def describe(instance) -> str:
    symbol = settings.CURRENCY_SYMBOL

    if isinstance(instance, Student):
        return f'Student: {instance.name} ({instance.grade})'

    if isinstance(instance, PaymentRecord):
        student = Student.objects.filter(pk=instance.student_id).only('name').first()
        student_name = student.name if student else 'Unknown Student'
        return f'Payment: {symbol}{format_amount(instance.amount_paid)} for {student_name}'

    if isinstance(instance, Expense):
        return f'Expense: {instance.get_category_display()} - {symbol}{format_amount(instance.amount)}'

    raise TypeError(f'{instance.__class__.__name__} rows cannot be moved to the recycle bin.')


@transaction.atomic
def soft_delete(instance, id_generator=None) -> TrashItem:
    """Move a row into the recycle bin: snapshot it and delete it in one transaction."""
    item_type = TRASH_TYPES.get(type(instance))
    if item_type is None:
        raise TypeError(f'{instance.__class__.__name__} rows cannot be moved to the recycle bin.')

    item = TrashItem.objects.create(
        id=(id_generator or default_trash_ids)(),
        item_type=item_type,
        original_id=str(instance.pk),
        data=snapshot(instance),
        description=describe(instance),
    )
    instance.delete()

    logger.info('%s %s moved to recycle bin as %s', item_type, item.original_id, item.id)
    return item


def _soft_delete_by_id(model, object_id, id_generator=None):
    instance = model.objects.filter(pk=object_id).first()
    if instance is None:
        logger.warning('%s %s not found for soft delete', model.__name__, object_id)
        return None
    return soft_delete(instance, id_generator=id_generator)


def soft_delete_student(student_id, id_generator=None):
    return _soft_delete_by_id(Student, student_id, id_generator=id_generator)


def soft_delete_payment(payment_id, id_generator=None):
    return _soft_delete_by_id(PaymentRecord, payment_id, id_generator=id_generator)


def soft_delete_expense(expense_id, id_generator=None):
    return _soft_delete_by_id(Expense, expense_id, id_generator=id_generator)


def restore_trash_item(trash_id) -> bool:
    item = TrashItem.objects.filter(pk=trash_id).first()
    if item is None:
        logger.warning('Trash item %s not found for restore', trash_id)
        return False

    model = TRASH_MODELS[item.item_type]
    if model.objects.filter(pk=item.original_id).exists():
        logger.warning(
            'Refused to restore %s %s: an active row already uses that id',
            item.item_type,
            item.original_id,
        )
        return False

    session_key = item.data.get('fields', {}).get('session')
    if session_key and not AcademicSession.objects.filter(name=session_key[0]).exists():
        logger.warning('Refused to restore %s %s: its session no longer exists', item.item_type, item.original_id)
        return False

    with transaction.atomic():
        for restored in serializers.deserialize('python', [item.data]):
            restored.save()
        item.delete()

    logger.info('%s %s restored from %s', item.item_type, item.original_id, trash_id)
    return True


def permanent_delete_trash_item(trash_id) -> bool:
    deleted, _ = TrashItem.objects.filter(pk=trash_id).delete()
    if deleted:
        logger.info('Trash item %s permanently deleted', trash_id)
    return bool(deleted)


def list_trash(item_type=None):
    items = TrashItem.objects.order_by('-deleted_at', '-id')
    if item_type and item_type != 'ALL':
        items = items.filter(item_type=item_type)
    return items
