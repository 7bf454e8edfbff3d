from datetime import date, timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase
from django.urls import reverse

from apps.core.academic_sessions.services import add_session
from apps.core.users.models import User

from .models import Expense
from .services import (
    aggregate_expense_stats,
    create_expense,
    expense_totals_by_category,
    filter_expenses,
    update_expense,
)


def _expense(expense_id, category, amount, spent_on, description=''):
    return Expense(id=expense_id, category=category, amount=Decimal(amount), date=spent_on, description=description)


class ExpenseFilterTests(SimpleTestCase):
    def setUp(self):
        self.today = date(2024, 9, 15)
        self.expenses = [
            _expense('E001', Expense.CATEGORY_SALARIES, '45000', date(2024, 9, 1), 'Monthly staff salaries'),
            _expense('E002', Expense.CATEGORY_UTILITIES, '3200', date(2024, 9, 5), 'Electricity bill'),
            _expense('E003', Expense.CATEGORY_EVENTS, '5000', self.today, 'Teachers Day celebration'),
            _expense('E004', Expense.CATEGORY_UTILITIES, '800', self.today, 'Water bill'),
        ]

    def test_category_filter(self):
        rows = filter_expenses(self.expenses, category=Expense.CATEGORY_UTILITIES)

        self.assertEqual([expense.id for expense in rows], ['E004', 'E002'])
        self.assertEqual(len(filter_expenses(self.expenses, category='ALL')), 4)

    def test_inclusive_date_range_and_search(self):
        rows = filter_expenses(self.expenses, start_date='2024-09-05', end_date=self.today)
        self.assertEqual([expense.id for expense in rows], ['E004', 'E003', 'E002'])

        rows = filter_expenses(self.expenses, search='bill')
        self.assertEqual([expense.id for expense in rows], ['E004', 'E002'])

        rows = filter_expenses(self.expenses, search='salaries')
        self.assertEqual([expense.id for expense in rows], ['E001'])

    def test_stats(self):
        self.assertEqual(aggregate_expense_stats(self.expenses, today=self.today), {
            'total': Decimal('54000.00'),
            'today_amount': Decimal('5800.00'),
            'count': 4,
        })

    def test_totals_by_category(self):
        totals = expense_totals_by_category(self.expenses)

        self.assertEqual(list(totals), [
            Expense.CATEGORY_SALARIES,
            Expense.CATEGORY_UTILITIES,
            Expense.CATEGORY_EVENTS,
        ])
        self.assertEqual(totals[Expense.CATEGORY_UTILITIES], Decimal('4000.00'))


class ExpenseServiceTests(TestCase):
    def setUp(self):
        self.session = add_session('2024-2025')

    def test_create_uses_the_current_session(self):
        expense = create_expense(category=Expense.CATEGORY_SUPPLIES, amount='2100', description=' Stationery ')

        self.assertEqual(expense.session, self.session)
        self.assertEqual(expense.description, 'Stationery')
        self.assertTrue(expense.id.startswith('E'))

    def test_invalid_amount_and_category(self):
        with self.assertRaises(ValidationError) as ctx:
            create_expense(category=Expense.CATEGORY_SUPPLIES, amount='0')
        self.assertEqual(ctx.exception.code, 'invalid_amount')

        with self.assertRaises(ValidationError):
            create_expense(category='fireworks', amount='10')

        self.assertFalse(Expense.objects.exists())

    def test_update(self):
        expense = create_expense(category=Expense.CATEGORY_SPORTS, amount='900')
        expense.amount = Decimal('950')
        expense.date = date.today() - timedelta(days=2)

        update_expense(expense)

        expense.refresh_from_db()
        self.assertEqual(expense.amount, Decimal('950.00'))

    def test_update_of_missing_expense_returns_none(self):
        ghost = Expense(id='E404', session=self.session, category=Expense.CATEGORY_SPORTS, amount=Decimal('1'))

        self.assertIsNone(update_expense(ghost))
        self.assertFalse(Expense.objects.filter(pk='E404').exists())


class ExpenseViewTests(TestCase):
    def setUp(self):
        add_session('2024-2025')
        self.employee = User.objects.create_user(username='bursar', password='pass12345', role=User.ROLE_EMPLOYEE)

    def test_record_list_and_delete(self):
        self.client.force_login(self.employee)

        response = self.client.post(reverse('expense_create'), {
            'category': Expense.CATEGORY_MAINTENANCE,
            'description': 'Plumbing repairs in block A',
            'amount': '1500',
            'date': '2024-09-10',
        })
        self.assertEqual(response.status_code, 201)
        expense_id = response.json()['id']

        response = self.client.get(reverse('expense_list'), {'category': Expense.CATEGORY_MAINTENANCE})
        body = response.json()
        self.assertEqual(body['stats']['count'], 1)
        self.assertEqual(body['expenses'][0]['category_label'], 'Maintenance')

        response = self.client.post(reverse('expense_delete', args=[expense_id]))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Expense.objects.filter(pk=expense_id).exists())

    def test_edit(self):
        expense = create_expense(category=Expense.CATEGORY_EVENTS, amount='5000', expense_date=date(2024, 9, 15))
        self.client.force_login(self.employee)

        response = self.client.post(reverse('expense_update', args=[expense.id]), {
            'category': Expense.CATEGORY_EVENTS,
            'description': 'Annual day',
            'amount': '5500',
            'date': '',
        })

        self.assertEqual(response.status_code, 200)
        expense.refresh_from_db()
        self.assertEqual(expense.amount, Decimal('5500.00'))
        self.assertEqual(expense.description, 'Annual day')
        self.assertEqual(expense.date, date(2024, 9, 15))
