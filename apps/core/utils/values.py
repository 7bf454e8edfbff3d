from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.core.exceptions import ValidationError

ZERO = Decimal('0.00')


def to_decimal(value) -> Decimal:
    return Decimal(str(value or '0'))


def quantize(value) -> Decimal:
    return to_decimal(value).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def as_date(value):
    """Calendar date of a date, datetime or ISO string; None for empty values."""
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def clean_amount(value, label, allow_zero=False) -> Decimal:
    try:
        amount = quantize(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f'{label} must be a number.', code='invalid_amount')
    if not amount.is_finite():
        raise ValidationError(f'{label} must be a number.', code='invalid_amount')

    if amount < 0 or (amount == 0 and not allow_zero):
        raise ValidationError(f'{label} must be greater than zero.', code='invalid_amount')
    return amount


def format_amount(value) -> str:
    """Human amount without trailing zeros: 1500.00 -> 1500, 99.50 -> 99.5."""
    amount = quantize(value).normalize()
    return f'{amount:f}'
