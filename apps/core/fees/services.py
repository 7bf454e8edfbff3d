from __future__ import annotations

import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.core.academic_sessions.services import resolve_session
from apps.core.students.models import Student
from apps.core.utils.ids import fee_structure_ids as default_fee_structure_ids
from apps.core.utils.ids import payment_ids as default_payment_ids
from apps.core.utils.values import ZERO, as_date, clean_amount, quantize, to_decimal

from .models import FeeStructure, PaymentRecord

logger = logging.getLogger(__name__)

STATUS_PAID = 'PAID'
STATUS_PARTIAL = 'PARTIAL'
STATUS_PENDING = 'PENDING'
STATUS_OVERDUE = 'OVERDUE'


def _fee_map(fee_structures):
    if isinstance(fee_structures, dict):
        return fee_structures
    return {str(fee.id): fee for fee in fee_structures}


def _override_amount(student) -> Decimal:
    return to_decimal(getattr(student, 'total_class_fees', None))


# ---------------------------------------------------------------------------
# Ledger
#
# Balances are never stored; every figure below is recomputed from the rows
# passed in. Unknown fee structures or students count as zero, nothing raises.
# ---------------------------------------------------------------------------

def compute_student_total(student, fee_structures) -> Decimal:
    """Total liability of a student.

    A positive ``total_class_fees`` override stands for the student's primary
    fee line and replaces the sum of the referenced fee structures; otherwise
    the referenced structures are summed, ignoring ids that do not resolve.
    ``back_fees`` is always added on top.
    """
    override = _override_amount(student)
    if override > 0:
        total = override
    else:
        fees = _fee_map(fee_structures)
        total = sum(
            (to_decimal(fees[fee_id].amount) for fee_id in (student.fee_structure_ids or []) if fee_id in fees),
            ZERO,
        )
    return quantize(total + to_decimal(student.back_fees))


def effective_fee_amount(student, fee_structure_id, fee_structures) -> Decimal:
    """Amount billed on one fee line; the override only replaces the first line."""
    fee_structure_id = str(fee_structure_id)
    fee = _fee_map(fee_structures).get(fee_structure_id)
    amount = to_decimal(fee.amount) if fee is not None else ZERO

    fee_ids = list(student.fee_structure_ids or [])
    override = _override_amount(student)
    if override > 0 and fee_ids and fee_ids[0] == fee_structure_id:
        amount = override
    return quantize(amount)


def compute_student_paid(student_id, payments) -> Decimal:
    return quantize(sum(
        (to_decimal(payment.amount_paid) for payment in payments if payment.student_id == student_id),
        ZERO,
    ))


def compute_due(total, paid) -> Decimal:
    due = quantize(to_decimal(total) - to_decimal(paid))
    return due if due > 0 else ZERO


def compute_fee_line_stats(student, fee_structure_id, fee_structures, payments):
    fee_structure_id = str(fee_structure_id)
    total = effective_fee_amount(student, fee_structure_id, fee_structures)
    paid = quantize(sum(
        (
            to_decimal(payment.amount_paid)
            for payment in payments
            if payment.student_id == student.id and payment.fee_structure_id == fee_structure_id
        ),
        ZERO,
    ))
    return {
        'total': total,
        'paid': paid,
        'due': compute_due(total, paid),
    }


def payment_percentage(total, paid) -> float:
    total = to_decimal(total)
    if total <= 0:
        return 0.0
    return float(to_decimal(paid) / total * 100)


def aggregate_collection_stats(records, today=None, amount_field='amount_paid'):
    """Sum, today's sum and count over already-filtered records.

    "Today" is the local calendar date at call time, compared by date
    equality with each record's stored date.
    """
    today = as_date(today) or timezone.localdate()
    total = ZERO
    today_amount = ZERO
    count = 0
    for record in records:
        amount = to_decimal(getattr(record, amount_field))
        total += amount
        if as_date(record.date) == today:
            today_amount += amount
        count += 1

    return {
        'total': quantize(total),
        'today_amount': quantize(today_amount),
        'count': count,
    }


def filter_payments(payments, students=None, student_id=None, start_date=None, end_date=None, search=''):
    """Payment listing: optional filters, newest first, ties by payment id descending."""
    if isinstance(students, dict):
        names = students
    else:
        names = {str(student.id): student.name for student in (students or [])}

    start = as_date(start_date)
    end = as_date(end_date)
    needle = (search or '').strip().lower()

    rows = []
    for payment in payments:
        if student_id and payment.student_id != student_id:
            continue

        paid_on = as_date(payment.date)
        if start and paid_on < start:
            continue
        # Day granularity: anything dated on the end day is inside the range.
        if end and paid_on > end:
            continue

        if needle:
            haystack = (names.get(payment.student_id, ''), payment.student_id, payment.id)
            if not any(needle in str(value).lower() for value in haystack):
                continue

        rows.append(payment)

    rows.sort(key=lambda payment: (as_date(payment.date), str(payment.id)), reverse=True)
    return rows


def payment_status(student, fee_structures, payments, today=None) -> str:
    today = as_date(today) or timezone.localdate()
    fees = _fee_map(fee_structures)

    total = compute_student_total(student, fees)
    paid = compute_student_paid(student.id, payments)
    if compute_due(total, paid) == 0 and total > 0:
        return STATUS_PAID

    for fee_id in student.fee_structure_ids or []:
        fee = fees.get(fee_id)
        if fee is None or not fee.due_date:
            continue
        line = compute_fee_line_stats(student, fee_id, fees, payments)
        if line['paid'] < line['total'] and as_date(fee.due_date) < today:
            return STATUS_OVERDUE

    if paid > 0:
        return STATUS_PARTIAL
    return STATUS_PENDING


def student_summary(student, fee_structures, payments, today=None):
    fees = _fee_map(fee_structures)
    total = compute_student_total(student, fees)
    paid = compute_student_paid(student.id, payments)
    return {
        'total': total,
        'paid': paid,
        'due': compute_due(total, paid),
        'percentage': min(100.0, payment_percentage(total, paid)),
        'status': payment_status(student, fees, payments, today=today),
    }


def _empty_balance():
    return {'total': ZERO, 'paid': ZERO, 'due': ZERO}


def student_balance(student_id):
    student = Student.objects.filter(pk=student_id).first()
    if student is None:
        return _empty_balance()

    fee_structures = FeeStructure.objects.filter(id__in=student.fee_structure_ids or [])
    payments = list(PaymentRecord.objects.filter(student_id=student.id))
    total = compute_student_total(student, fee_structures)
    paid = compute_student_paid(student.id, payments)
    return {
        'total': total,
        'paid': paid,
        'due': compute_due(total, paid),
    }


def fee_line_balance(student_id, fee_structure_id):
    student = Student.objects.filter(pk=student_id).first()
    if student is None:
        return _empty_balance()

    fee_structures = FeeStructure.objects.filter(pk=fee_structure_id)
    payments = PaymentRecord.objects.filter(student_id=student.id, fee_structure_id=fee_structure_id)
    return compute_fee_line_stats(student, fee_structure_id, fee_structures, list(payments))


# ---------------------------------------------------------------------------
# Store access and mutations
# ---------------------------------------------------------------------------

def list_fee_structures(session):
    return FeeStructure.objects.for_session(session).order_by('name', 'id')


def list_payments(session):
    return PaymentRecord.objects.for_session(session).order_by('-date', '-id')


def _clean_method(method) -> str:
    valid_methods = {value for value, _ in PaymentRecord.METHOD_CHOICES}
    if method not in valid_methods:
        raise ValidationError(f'Unsupported payment method {method}.', code='invalid_method')
    return method


@transaction.atomic
def create_fee_structure(*, name, amount, session=None, due_date=None, fee_id=None, id_generator=None):
    fee = FeeStructure(
        id=fee_id or (id_generator or default_fee_structure_ids)(),
        name=name,
        amount=clean_amount(amount, 'Fee amount', allow_zero=True),
        due_date=as_date(due_date),
        session=resolve_session(session),
    )
    fee.full_clean()
    fee.save(force_insert=True)

    logger.info('Fee structure %s created in session %s', fee.id, fee.session)
    return fee


@transaction.atomic
def create_payment(
    *,
    student: Student,
    fee_structure: FeeStructure,
    amount_paid,
    method=PaymentRecord.METHOD_CASH,
    payment_date=None,
    session=None,
    id_generator=None,
):
    amount = clean_amount(amount_paid, 'Payment amount')
    method = _clean_method(method)
    session = resolve_session(session or getattr(student, 'session', None))

    payment = PaymentRecord(
        id=(id_generator or default_payment_ids)(),
        student=student,
        fee_structure=fee_structure,
        amount_paid=amount,
        date=as_date(payment_date) or timezone.localdate(),
        method=method,
        session=session,
    )
    payment.save(force_insert=True)

    logger.info(
        'Payment %s recorded: %s for student %s on %s',
        payment.id,
        payment.amount_paid,
        payment.student_id,
        payment.fee_structure_id,
    )
    return payment


@transaction.atomic
def update_payment(payment: PaymentRecord):
    """Replace the stored payment with the same id; returns None when it does not exist."""
    if not PaymentRecord.objects.filter(pk=payment.pk).exists():
        logger.warning('Payment %s not found for update', payment.pk)
        return None

    payment.amount_paid = clean_amount(payment.amount_paid, 'Payment amount')
    payment.method = _clean_method(payment.method)
    payment.date = as_date(payment.date) or timezone.localdate()
    payment.save(force_update=True)

    logger.info('Payment %s updated', payment.id)
    return payment
