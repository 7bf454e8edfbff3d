from decimal import Decimal
from itertools import repeat

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase

from .ids import MonotonicIdGenerator
from .values import as_date, clean_amount, format_amount


class MonotonicIdGeneratorTests(SimpleTestCase):
    def test_ids_increase_even_when_the_clock_stands_still(self):
        generate = MonotonicIdGenerator('P', clock=repeat(1_700_000_000_000_000_000).__next__)

        ids = [generate() for _ in range(3)]

        self.assertEqual(ids, ['P1700000000000000', 'P1700000000000001', 'P1700000000000002'])

    def test_clock_going_backwards_does_not_repeat_ids(self):
        ticks = iter([5_000_000, 3_000_000, 9_000_000])
        generate = MonotonicIdGenerator('T_', clock=lambda: next(ticks))

        self.assertEqual([generate(), generate(), generate()], ['T_5000', 'T_5001', 'T_9000'])

    def test_real_clock_ids_are_unique(self):
        generate = MonotonicIdGenerator('E')

        ids = [generate() for _ in range(1000)]

        self.assertEqual(len(set(ids)), 1000)


class ValueHelperTests(SimpleTestCase):
    def test_clean_amount(self):
        self.assertEqual(clean_amount('12.345', 'Amount'), Decimal('12.35'))
        self.assertEqual(clean_amount(0, 'Amount', allow_zero=True), Decimal('0.00'))

        for value in ('0', '-1', 'twelve'):
            with self.assertRaises(ValidationError):
                clean_amount(value, 'Amount')

    def test_format_amount(self):
        self.assertEqual(format_amount(Decimal('1500.00')), '1500')
        self.assertEqual(format_amount(Decimal('99.50')), '99.5')
        self.assertEqual(format_amount(Decimal('0.25')), '0.25')

    def test_as_date(self):
        self.assertIsNone(as_date(''))
        self.assertEqual(str(as_date('2024-09-01T10:30:00')), '2024-09-01')
