from datetime import date
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse

from apps.core.academic_sessions.services import add_session
from apps.core.expenses.models import Expense
from apps.core.expenses.services import create_expense
from apps.core.fees.services import create_fee_structure, create_payment
from apps.core.students.services import create_student
from apps.core.users.models import User

from .services import session_dashboard_summary


class DashboardSummaryTests(TestCase):
    def setUp(self):
        self.session = add_session('2024-2025')
        self.today = date(2024, 9, 10)

        class_fee = create_fee_structure(fee_id='F_CLASS', name='Class fees', amount='3000', due_date='2024-05-10')
        exam_fee = create_fee_structure(fee_id='F_EXAM', name='Exam fees', amount='500', due_date=self.today)

        self.alice = create_student(
            name='Alice', grade='10th', parent_name='Robert', contact='1',
            fee_structure_ids=['F_CLASS', 'F_EXAM'],
        )
        self.bob = create_student(
            name='Bob', grade='8th', parent_name='Sarah', contact='2',
            fee_structure_ids=['F_CLASS'],
            back_fees='200',
        )

        create_payment(student=self.alice, fee_structure=class_fee, amount_paid='3000', payment_date='2024-08-01')
        create_payment(student=self.alice, fee_structure=exam_fee, amount_paid='700', payment_date=self.today)
        self.last_payment = create_payment(
            student=self.bob, fee_structure=class_fee, amount_paid='1000', payment_date=self.today,
        )
        create_expense(category=Expense.CATEGORY_UTILITIES, amount='1200', expense_date=self.today)
        create_expense(category=Expense.CATEGORY_SALARIES, amount='2000', expense_date='2024-09-01')

    def test_summary(self):
        summary = session_dashboard_summary(self.session, today=self.today)

        self.assertEqual(summary['total_students'], 2)
        self.assertEqual(summary['total_expected'], Decimal('6700.00'))
        self.assertEqual(summary['total_collected'], Decimal('4700.00'))
        # Alice's overpayment does not offset Bob's balance.
        self.assertEqual(summary['total_pending'], Decimal('2200.00'))
        self.assertEqual(summary['total_expenses'], Decimal('3200.00'))
        self.assertEqual(summary['profit_loss'], Decimal('1500.00'))
        self.assertEqual(summary['today_collection'], Decimal('1700.00'))
        self.assertEqual(summary['today_expenses'], Decimal('1200.00'))
        self.assertEqual(summary['today_profit_loss'], Decimal('500.00'))
        self.assertEqual(summary['due_today'], Decimal('0.00'))
        self.assertEqual(summary['class_distribution'], [
            {'grade': '10th', 'count': 1},
            {'grade': '8th', 'count': 1},
        ])
        self.assertEqual([row['month'] for row in summary['monthly_collection']], ['Aug 2024', 'Sep 2024'])
        self.assertEqual(summary['last_payment'], self.last_payment)

    def test_empty_session(self):
        other = add_session('2025-2026')

        summary = session_dashboard_summary(other, today=self.today)

        self.assertEqual(summary['total_students'], 0)
        self.assertEqual(summary['collection_rate'], 0.0)
        self.assertIsNone(summary['last_payment'])
        self.assertIsNone(summary['last_expense'])


class DashboardViewTests(TestCase):
    def setUp(self):
        add_session('2024-2025')
        self.employee = User.objects.create_user(username='bursar', password='pass12345', role=User.ROLE_EMPLOYEE)
        student = create_student(name='Alice', grade='10th', parent_name='Robert', contact='1')
        self.student_user = User.objects.create_user(
            username='alice',
            password='pass12345',
            role=User.ROLE_STUDENT,
            student=student,
        )

    def test_staff_can_open_the_dashboard(self):
        self.client.force_login(self.employee)

        response = self.client.get(reverse('dashboard'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['session'], '2024-2025')
        self.assertEqual(response.json()['total_students'], 1)

    def test_dashboard_is_read_only(self):
        self.client.force_login(self.employee)

        response = self.client.post(reverse('dashboard'))

        self.assertEqual(response.status_code, 405)

    def test_students_cannot_open_the_dashboard(self):
        self.client.force_login(self.student_user)

        response = self.client.get(reverse('dashboard'))

        self.assertEqual(response.status_code, 403)
