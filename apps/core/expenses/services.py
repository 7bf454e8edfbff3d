import logging
from collections import OrderedDict

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.core.academic_sessions.services import resolve_session
from apps.core.fees.services import aggregate_collection_stats
from apps.core.utils.ids import expense_ids as default_expense_ids
from apps.core.utils.values import ZERO, as_date, clean_amount, quantize, to_decimal

from .models import Expense

logger = logging.getLogger(__name__)

ALL_CATEGORIES = 'ALL'


def _clean_category(category) -> str:
    valid_categories = {value for value, _ in Expense.CATEGORY_CHOICES}
    if category not in valid_categories:
        raise ValidationError(f'Unknown expense category {category}.', code='invalid_category')
    return category


def list_expenses(session):
    return Expense.objects.for_session(session).order_by('-date', '-id')


@transaction.atomic
def create_expense(*, category, amount, description='', expense_date=None, session=None, id_generator=None):
    expense = Expense(
        id=(id_generator or default_expense_ids)(),
        session=resolve_session(session),
        category=_clean_category(category),
        description=(description or '').strip(),
        amount=clean_amount(amount, 'Expense amount'),
        date=as_date(expense_date) or timezone.localdate(),
    )
    expense.save(force_insert=True)

    logger.info('Expense %s recorded: %s %s', expense.id, expense.category, expense.amount)
    return expense


@transaction.atomic
def update_expense(expense: Expense):
    if not Expense.objects.filter(pk=expense.pk).exists():
        logger.warning('Expense %s not found for update', expense.pk)
        return None

    expense.category = _clean_category(expense.category)
    expense.amount = clean_amount(expense.amount, 'Expense amount')
    expense.date = as_date(expense.date) or timezone.localdate()
    expense.save(force_update=True)

    logger.info('Expense %s updated', expense.id)
    return expense


def filter_expenses(expenses, category=None, start_date=None, end_date=None, search=''):
    start = as_date(start_date)
    end = as_date(end_date)
    needle = (search or '').strip().lower()
    labels = dict(Expense.CATEGORY_CHOICES)

    rows = []
    for expense in expenses:
        if category and category != ALL_CATEGORIES and expense.category != category:
            continue

        spent_on = as_date(expense.date)
        if start and spent_on < start:
            continue
        if end and spent_on > end:
            continue

        if needle:
            haystack = (expense.description, expense.category, labels.get(expense.category, ''), expense.id)
            if not any(needle in str(value).lower() for value in haystack):
                continue

        rows.append(expense)

    rows.sort(key=lambda expense: (as_date(expense.date), str(expense.id)), reverse=True)
    return rows


def aggregate_expense_stats(expenses, today=None):
    return aggregate_collection_stats(expenses, today=today, amount_field='amount')


def expense_totals_by_category(expenses):
    """Category key -> summed amount, in the category order shown to users."""
    totals = OrderedDict((value, ZERO) for value, _ in Expense.CATEGORY_CHOICES)
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, ZERO) + to_decimal(expense.amount)
    return OrderedDict((key, quantize(amount)) for key, amount in totals.items() if amount > 0)
