from collections import Counter, OrderedDict

from django.utils import timezone

from apps.core.expenses.models import Expense
from apps.core.expenses.services import aggregate_expense_stats
from apps.core.fees.models import FeeStructure, PaymentRecord
from apps.core.fees.services import (
    aggregate_collection_stats,
    compute_due,
    compute_fee_line_stats,
    compute_student_paid,
    compute_student_total,
    payment_percentage,
)
from apps.core.students.models import Student
from apps.core.utils.values import ZERO, as_date, quantize


def _monthly_collection(payments):
    months = OrderedDict()
    for payment in sorted(payments, key=lambda payment: (as_date(payment.date), payment.id)):
        paid_on = as_date(payment.date)
        key = (paid_on.year, paid_on.month)
        if key not in months:
            months[key] = {'month': paid_on.strftime('%b %Y'), 'amount': ZERO}
        months[key]['amount'] = quantize(months[key]['amount'] + payment.amount_paid)
    return list(months.values())


def _latest(records):
    return max(records, key=lambda record: (as_date(record.date), record.id), default=None)


def session_dashboard_summary(session, today=None):
    """Headline figures of one session for the dashboard.

    Pending is the sum of per-student dues, so one student's overpayment
    never hides another student's balance.
    """
    today = as_date(today) or timezone.localdate()

    students = list(Student.objects.for_session(session))
    payments = list(PaymentRecord.objects.for_session(session))
    expenses = list(Expense.objects.for_session(session))

    referenced_ids = {fee_id for student in students for fee_id in student.fee_structure_ids or []}
    fee_structures = {
        fee.id: fee for fee in FeeStructure.objects.filter(id__in=referenced_ids)
    }

    total_expected = ZERO
    total_pending = ZERO
    due_today = ZERO
    for student in students:
        total = compute_student_total(student, fee_structures)
        total_expected += total
        total_pending += compute_due(total, compute_student_paid(student.id, payments))

        for fee_id in student.fee_structure_ids or []:
            fee = fee_structures.get(fee_id)
            if fee is not None and fee.due_date == today:
                due_today += compute_fee_line_stats(student, fee_id, fee_structures, payments)['due']

    collection = aggregate_collection_stats(payments, today=today)
    spending = aggregate_expense_stats(expenses, today=today)
    grades = Counter(student.grade for student in students)

    return {
        'session': session.name,
        'total_students': len(students),
        'total_expected': quantize(total_expected),
        'total_collected': collection['total'],
        'total_pending': quantize(total_pending),
        'collection_rate': round(payment_percentage(total_expected, collection['total']), 1),
        'total_expenses': spending['total'],
        'profit_loss': quantize(collection['total'] - spending['total']),
        'today_collection': collection['today_amount'],
        'today_expenses': spending['today_amount'],
        'today_profit_loss': quantize(collection['today_amount'] - spending['today_amount']),
        'due_today': quantize(due_today),
        'monthly_collection': _monthly_collection(payments),
        'class_distribution': [
            {'grade': grade, 'count': grades[grade]} for grade in sorted(grades)
        ],
        'last_payment': _latest(payments),
        'last_expense': _latest(expenses),
    }
