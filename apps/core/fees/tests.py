from datetime import date, timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from apps.core.academic_sessions.services import add_session
from apps.core.recycle_bin.models import TrashItem
from apps.core.recycle_bin.services import restore_trash_item, soft_delete_payment
from apps.core.students.models import Student
from apps.core.students.services import create_student
from apps.core.users.models import User

from .models import FeeStructure, PaymentRecord
from .services import (
    STATUS_OVERDUE,
    STATUS_PAID,
    STATUS_PARTIAL,
    STATUS_PENDING,
    aggregate_collection_stats,
    compute_due,
    compute_fee_line_stats,
    compute_student_paid,
    compute_student_total,
    create_fee_structure,
    create_payment,
    effective_fee_amount,
    fee_line_balance,
    filter_payments,
    payment_percentage,
    payment_status,
    student_balance,
    student_summary,
    update_payment,
)


def _fee(fee_id, amount, due_date=None):
    return FeeStructure(id=fee_id, name=fee_id, amount=Decimal(amount), due_date=due_date)


def _payment(payment_id, student_id, fee_id, amount, paid_on):
    return PaymentRecord(
        id=payment_id,
        student_id=student_id,
        fee_structure_id=fee_id,
        amount_paid=Decimal(amount),
        date=paid_on,
    )


class LedgerComputationTests(SimpleTestCase):
    def setUp(self):
        self.fees = [_fee('F1', '5000'), _fee('F2', '1200'), _fee('F3', '300')]

    def test_total_sums_matched_structures_plus_back_fees(self):
        student = Student(id='ST001', fee_structure_ids=['F1', 'F2', 'MISSING'], back_fees=Decimal('500'))

        self.assertEqual(compute_student_total(student, self.fees), Decimal('6700.00'))

    def test_override_replaces_structure_sum_but_keeps_back_fees(self):
        student = Student(
            id='ST001',
            fee_structure_ids=['F1', 'F2'],
            total_class_fees=Decimal('7000'),
            back_fees=Decimal('250'),
        )

        self.assertEqual(compute_student_total(student, self.fees), Decimal('7250.00'))

    def test_zero_override_is_ignored(self):
        student = Student(id='ST001', fee_structure_ids=['F1'], total_class_fees=Decimal('0'))

        self.assertEqual(compute_student_total(student, self.fees), Decimal('5000.00'))

    def test_override_only_applies_to_the_first_fee_line(self):
        student = Student(id='ST001', fee_structure_ids=['F1', 'F2'], total_class_fees=Decimal('7000'))

        self.assertEqual(effective_fee_amount(student, 'F1', self.fees), Decimal('7000.00'))
        self.assertEqual(effective_fee_amount(student, 'F2', self.fees), Decimal('1200.00'))
        self.assertEqual(effective_fee_amount(student, 'UNKNOWN', self.fees), Decimal('0.00'))

    def test_due_never_goes_negative(self):
        student = Student(id='ST001', fee_structure_ids=['F3'])
        payments = [_payment('P001', 'ST001', 'F3', '1000', date(2024, 9, 1))]

        total = compute_student_total(student, self.fees)
        paid = compute_student_paid('ST001', payments)

        self.assertEqual(paid, Decimal('1000.00'))
        self.assertEqual(compute_due(total, paid), Decimal('0.00'))

    def test_paid_only_counts_the_students_payments(self):
        payments = [
            _payment('P001', 'ST001', 'F1', '100', date(2024, 9, 1)),
            _payment('P002', 'ST002', 'F1', '900', date(2024, 9, 1)),
        ]

        self.assertEqual(compute_student_paid('ST001', payments), Decimal('100.00'))
        self.assertEqual(compute_student_paid('ST404', payments), Decimal('0.00'))

    def test_fee_line_stats(self):
        student = Student(id='ST001', fee_structure_ids=['F1', 'F2'])
        payments = [
            _payment('P001', 'ST001', 'F2', '200', date(2024, 9, 1)),
            _payment('P002', 'ST001', 'F1', '900', date(2024, 9, 1)),
        ]

        stats = compute_fee_line_stats(student, 'F2', self.fees, payments)

        self.assertEqual(stats, {
            'total': Decimal('1200.00'),
            'paid': Decimal('200.00'),
            'due': Decimal('1000.00'),
        })

    def test_payment_percentage(self):
        self.assertEqual(payment_percentage(Decimal('5000'), Decimal('2500')), 50.0)
        self.assertEqual(payment_percentage(Decimal('0'), Decimal('100')), 0.0)
        self.assertEqual(payment_percentage(Decimal('100'), Decimal('150')), 150.0)

    def test_collection_stats_counts_today_separately(self):
        today = date(2024, 9, 1)
        payments = [
            _payment('P001', 'ST001', 'F1', '100', today),
            _payment('P002', 'ST001', 'F1', '50', today),
            _payment('P003', 'ST001', 'F1', '20', today - timedelta(days=1)),
        ]

        self.assertEqual(aggregate_collection_stats(payments, today=today), {
            'total': Decimal('170.00'),
            'today_amount': Decimal('150.00'),
            'count': 3,
        })

    def test_collection_stats_of_nothing(self):
        self.assertEqual(aggregate_collection_stats([], today=date(2024, 9, 1)), {
            'total': Decimal('0.00'),
            'today_amount': Decimal('0.00'),
            'count': 0,
        })

    def test_date_range_is_inclusive_and_ties_sort_by_id_descending(self):
        t0 = date(2024, 9, 1)
        payments = [
            _payment('P001', 'ST001', 'F1', '100', t0),
            _payment('P003', 'ST001', 'F1', '20', t0 - timedelta(days=1)),
            _payment('P002', 'ST001', 'F1', '50', t0),
        ]

        rows = filter_payments(payments, start_date=t0, end_date=t0)

        self.assertEqual([payment.id for payment in rows], ['P002', 'P001'])

    def test_filter_by_student_and_search(self):
        students = [Student(id='ST001', name='Alice Johnson'), Student(id='ST002', name='Bob Smith')]
        payments = [
            _payment('P001', 'ST001', 'F1', '100', date(2024, 9, 1)),
            _payment('P002', 'ST002', 'F1', '50', date(2024, 9, 2)),
        ]

        self.assertEqual([p.id for p in filter_payments(payments, students, student_id='ST002')], ['P002'])
        self.assertEqual([p.id for p in filter_payments(payments, students, search='alice')], ['P001'])
        self.assertEqual([p.id for p in filter_payments(payments, students)], ['P002', 'P001'])

    def test_payment_status(self):
        today = date(2024, 9, 1)
        fees = [_fee('F1', '1000', due_date=date(2024, 8, 1)), _fee('F2', '500', due_date=date(2024, 12, 1))]
        student = Student(id='ST001', fee_structure_ids=['F2', 'F1'])

        self.assertEqual(payment_status(student, fees, [], today=today), STATUS_OVERDUE)

        paid_f1 = [_payment('P001', 'ST001', 'F1', '1000', today)]
        self.assertEqual(payment_status(student, fees, paid_f1, today=today), STATUS_PARTIAL)

        self.assertEqual(payment_status(student, fees, [], today=date(2024, 7, 1)), STATUS_PENDING)

        paid_all = paid_f1 + [_payment('P002', 'ST001', 'F2', '500', today)]
        self.assertEqual(payment_status(student, fees, paid_all, today=today), STATUS_PAID)

    def test_summary_caps_percentage(self):
        student = Student(id='ST001', fee_structure_ids=['F3'])
        payments = [_payment('P001', 'ST001', 'F3', '600', date(2024, 9, 1))]

        summary = student_summary(student, self.fees, payments, today=date(2024, 9, 1))

        self.assertEqual(summary['percentage'], 100.0)
        self.assertEqual(summary['due'], Decimal('0.00'))
        self.assertEqual(summary['status'], STATUS_PAID)


class PaymentServiceTests(TestCase):
    def setUp(self):
        self.session = add_session('2024-2025')
        self.fee = create_fee_structure(fee_id='F1', name='Class fees', amount='5000')
        self.student = create_student(
            name='Alice Johnson',
            grade='10th',
            parent_name='Robert Johnson',
            contact='555-0101',
            fee_structure_ids=['F1'],
            back_fees='500',
        )

    def _pay(self, amount):
        return create_payment(student=self.student, fee_structure=self.fee, amount_paid=amount)

    def test_balance_follows_payments_soft_delete_and_restore(self):
        self.assertEqual(student_balance(self.student.id)['total'], Decimal('5500.00'))

        self._pay('2000')
        balance = student_balance(self.student.id)
        self.assertEqual(balance['paid'], Decimal('2000.00'))
        self.assertEqual(balance['due'], Decimal('3500.00'))

        second = self._pay('3500')
        self.assertEqual(student_balance(self.student.id)['due'], Decimal('0.00'))

        item = soft_delete_payment(second.id)
        self.assertEqual(student_balance(self.student.id)['due'], Decimal('3500.00'))

        self.assertTrue(restore_trash_item(item.id))
        self.assertEqual(student_balance(self.student.id)['due'], Decimal('0.00'))
        self.assertFalse(TrashItem.objects.filter(pk=item.id).exists())

    def test_unknown_student_balance_is_zero(self):
        self.assertEqual(student_balance('ST999'), {
            'total': Decimal('0.00'),
            'paid': Decimal('0.00'),
            'due': Decimal('0.00'),
        })

    def test_fee_line_balance(self):
        self._pay('1200')

        self.assertEqual(fee_line_balance(self.student.id, 'F1'), {
            'total': Decimal('5000.00'),
            'paid': Decimal('1200.00'),
            'due': Decimal('3800.00'),
        })

    def test_non_positive_amounts_are_rejected_before_writing(self):
        for amount in ('0', '-10', 'abc'):
            with self.assertRaises(ValidationError) as ctx:
                self._pay(amount)
            self.assertEqual(ctx.exception.code, 'invalid_amount')

        self.assertFalse(PaymentRecord.objects.exists())

    def test_not_a_number_is_an_invalid_amount(self):
        for amount in ('NaN', 'Infinity'):
            with self.assertRaises(ValidationError) as ctx:
                self._pay(amount)
            self.assertEqual(ctx.exception.code, 'invalid_amount')

        payment = self._pay('100')
        payment.amount_paid = 'NaN'
        with self.assertRaises(ValidationError) as ctx:
            update_payment(payment)
        self.assertEqual(ctx.exception.code, 'invalid_amount')
        self.assertEqual(PaymentRecord.objects.get(pk=payment.id).amount_paid, Decimal('100.00'))

    def test_payment_defaults(self):
        payment = self._pay('100')

        self.assertEqual(payment.session, self.session)
        self.assertEqual(payment.method, PaymentRecord.METHOD_CASH)
        self.assertEqual(payment.date, timezone.localdate())

    def test_rapid_sequential_payments_get_unique_increasing_ids(self):
        ids = [self._pay('10').id for _ in range(25)]

        self.assertEqual(len(set(ids)), 25)
        self.assertEqual(ids, sorted(ids))

    def test_update_replaces_payment(self):
        payment = self._pay('100')
        payment.amount_paid = Decimal('250')
        payment.method = PaymentRecord.METHOD_UPI

        update_payment(payment)

        payment.refresh_from_db()
        self.assertEqual(payment.amount_paid, Decimal('250.00'))
        self.assertEqual(payment.method, PaymentRecord.METHOD_UPI)

    def test_update_of_missing_payment_is_a_no_op(self):
        ghost = PaymentRecord(
            id='P404',
            session=self.session,
            student=self.student,
            fee_structure=self.fee,
            amount_paid=Decimal('10'),
        )

        self.assertIsNone(update_payment(ghost))
        self.assertFalse(PaymentRecord.objects.filter(pk='P404').exists())

    def test_fee_structure_amount_may_be_zero_but_not_negative(self):
        back = create_fee_structure(fee_id='F_BACK', name='Back year fees', amount='0')
        self.assertEqual(back.amount, Decimal('0.00'))

        with self.assertRaises(ValidationError):
            create_fee_structure(name='Broken', amount='-1')


class PaymentViewTests(TestCase):
    def setUp(self):
        add_session('2024-2025')
        self.fee = create_fee_structure(fee_id='F1', name='Class fees', amount='3000')
        self.student = create_student(
            name='Bob Smith',
            grade='8th',
            parent_name='Sarah Smith',
            contact='555-0102',
            fee_structure_ids=['F1'],
        )
        self.admin = User.objects.create_user(username='admin', password='pass12345', role=User.ROLE_ADMIN)
        self.employee = User.objects.create_user(username='bursar', password='pass12345', role=User.ROLE_EMPLOYEE)
        self.student_user = User.objects.create_user(
            username='bob',
            password='pass12345',
            role=User.ROLE_STUDENT,
            student=self.student,
        )

    def test_employee_records_and_lists_payments(self):
        self.client.force_login(self.employee)

        response = self.client.post(reverse('payment_create'), {
            'student': self.student.id,
            'fee_structure': 'F1',
            'amount_paid': '1500',
            'method': PaymentRecord.METHOD_UPI,
        })
        self.assertEqual(response.status_code, 201)

        response = self.client.get(reverse('payment_list'))
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['stats']['count'], 1)
        self.assertEqual(body['payments'][0]['student_name'], 'Bob Smith')

    def test_edit_without_date_or_method_keeps_the_stored_values(self):
        payment = create_payment(
            student=self.student,
            fee_structure=self.fee,
            amount_paid='500',
            method=PaymentRecord.METHOD_UPI,
            payment_date=date(2024, 9, 10),
        )
        self.client.force_login(self.employee)

        for extra in ({}, {'date': '', 'method': ''}):
            response = self.client.post(reverse('payment_update', args=[payment.id]), {
                'student': self.student.id,
                'fee_structure': 'F1',
                'amount_paid': '650',
                **extra,
            })
            self.assertEqual(response.status_code, 200)

        payment.refresh_from_db()
        self.assertEqual(payment.amount_paid, Decimal('650.00'))
        self.assertEqual(payment.date, date(2024, 9, 10))
        self.assertEqual(payment.method, PaymentRecord.METHOD_UPI)

    def test_invalid_amount_is_rejected(self):
        self.client.force_login(self.employee)

        response = self.client.post(reverse('payment_create'), {
            'student': self.student.id,
            'fee_structure': 'F1',
            'amount_paid': '0',
        })

        self.assertEqual(response.status_code, 400)
        self.assertFalse(PaymentRecord.objects.exists())

    @override_settings(CURRENCY_SYMBOL='₹')
    def test_payment_delete_moves_it_to_the_recycle_bin(self):
        payment = create_payment(student=self.student, fee_structure=self.fee, amount_paid='500')
        self.client.force_login(self.employee)

        response = self.client.post(reverse('payment_delete', args=[payment.id]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['description'], 'Payment: ₹500 for Bob Smith')
        self.assertFalse(PaymentRecord.objects.filter(pk=payment.id).exists())

    def test_delete_of_unknown_payment_is_404(self):
        self.client.force_login(self.employee)

        response = self.client.post(reverse('payment_delete', args=['P404']))

        self.assertEqual(response.status_code, 404)

    def test_students_cannot_manage_payments(self):
        self.client.force_login(self.student_user)

        response = self.client.get(reverse('payment_list'))

        self.assertEqual(response.status_code, 403)

    def test_anonymous_requests_are_rejected(self):
        response = self.client.get(reverse('fee_structure_list'))

        self.assertEqual(response.status_code, 401)

    def test_only_admin_creates_fee_structures(self):
        self.client.force_login(self.employee)
        response = self.client.post(reverse('fee_structure_create'), {'name': 'Exam fees', 'amount': '500'})
        self.assertEqual(response.status_code, 403)

        self.client.force_login(self.admin)
        response = self.client.post(reverse('fee_structure_create'), {'name': 'Exam fees', 'amount': '500'})
        self.assertEqual(response.status_code, 201)
        self.assertTrue(FeeStructure.objects.filter(name='Exam fees').exists())
