from datetime import date
from decimal import Decimal
from unittest import mock

from django.forms.models import model_to_dict
from django.test import TestCase, override_settings
from django.urls import reverse

from apps.core.academic_sessions.services import add_session, delete_session, rename_session
from apps.core.expenses.models import Expense
from apps.core.expenses.services import create_expense
from apps.core.fees.models import PaymentRecord
from apps.core.fees.services import create_fee_structure, create_payment
from apps.core.students.models import Student
from apps.core.students.services import create_student, next_student_id
from apps.core.users.models import User

from .models import TrashItem
from .services import (
    list_trash,
    permanent_delete_trash_item,
    restore_trash_item,
    soft_delete,
    soft_delete_expense,
    soft_delete_payment,
    soft_delete_student,
)


class RecycleBinBaseTestCase(TestCase):
    def setUp(self):
        self.session = add_session('2024-2025')
        self.fee = create_fee_structure(fee_id='F_CLASS', name='Class fees', amount='3000')
        self.student = create_student(
            name='Alice Johnson',
            grade='10th',
            parent_name='Robert Johnson',
            contact='555-0101',
            address='12 Hill Road',
            date_of_birth=date(2010, 5, 17),
            fee_structure_ids=['F_CLASS', 'F_MISSING'],
            total_class_fees='3500',
            back_fees='750.50',
        )


@override_settings(CURRENCY_SYMBOL='₹')
class SoftDeleteTests(RecycleBinBaseTestCase):
    def test_student_round_trip_restores_an_identical_row(self):
        before = model_to_dict(Student.objects.get(pk=self.student.id))

        item = soft_delete_student(self.student.id)

        self.assertFalse(Student.objects.filter(pk=self.student.id).exists())
        self.assertEqual(item.item_type, TrashItem.TYPE_STUDENT)
        self.assertEqual(item.original_id, self.student.id)
        self.assertEqual(item.description, 'Student: Alice Johnson (10th)')

        self.assertTrue(restore_trash_item(item.id))

        after = model_to_dict(Student.objects.get(pk=self.student.id))
        self.assertEqual(after, before)
        self.assertFalse(TrashItem.objects.exists())

    def test_deleting_again_after_restore_produces_the_same_snapshot(self):
        first = soft_delete_student(self.student.id)
        first_data = TrashItem.objects.get(pk=first.id).data
        restore_trash_item(first.id)

        second = soft_delete_student(self.student.id)

        self.assertEqual(TrashItem.objects.get(pk=second.id).data, first_data)

    def test_payment_and_expense_descriptions(self):
        payment = create_payment(student=self.student, fee_structure=self.fee, amount_paid='1500')
        expense = create_expense(category=Expense.CATEGORY_UTILITIES, amount='3200.50', description='Power bill')

        self.assertEqual(soft_delete_payment(payment.id).description, 'Payment: ₹1500 for Alice Johnson')
        self.assertEqual(soft_delete_expense(expense.id).description, 'Expense: Utilities - ₹3200.5')

    def test_payment_of_a_trashed_student_names_an_unknown_student(self):
        payment = create_payment(student=self.student, fee_structure=self.fee, amount_paid='100')
        soft_delete_student(self.student.id)

        item = soft_delete_payment(payment.id)

        self.assertEqual(item.description, 'Payment: ₹100 for Unknown Student')

    def test_missing_ids_are_not_found(self):
        self.assertIsNone(soft_delete_student('ST999'))
        self.assertIsNone(soft_delete_payment('P404'))
        self.assertIsNone(soft_delete_expense('E404'))
        self.assertFalse(TrashItem.objects.exists())

    def test_failure_while_deleting_leaves_everything_in_place(self):
        with mock.patch.object(Student, 'delete', side_effect=RuntimeError('disk full')):
            with self.assertRaises(RuntimeError):
                soft_delete_student(self.student.id)

        self.assertTrue(Student.objects.filter(pk=self.student.id).exists())
        self.assertFalse(TrashItem.objects.exists())

    def test_injected_id_generator(self):
        item = soft_delete(self.student, id_generator=lambda: 'T_fixed')

        self.assertEqual(item.id, 'T_fixed')

    def test_unsupported_rows_are_refused(self):
        with self.assertRaises(TypeError):
            soft_delete(self.fee)


class RestoreTests(RecycleBinBaseTestCase):
    def test_unknown_trash_id(self):
        self.assertFalse(restore_trash_item('T_missing'))

    def test_restore_is_refused_when_the_id_is_in_use_again(self):
        item = soft_delete_student(self.student.id)
        create_student(
            student_id=self.student.id,
            name='Someone Else',
            grade='9th',
            parent_name='Parent',
            contact='555-0199',
        )

        self.assertFalse(restore_trash_item(item.id))
        self.assertTrue(TrashItem.objects.filter(pk=item.id).exists())
        self.assertEqual(Student.objects.get(pk=self.student.id).name, 'Someone Else')

    def test_restore_is_refused_when_the_session_was_deleted(self):
        old_session = add_session('2023-2024')
        expense = create_expense(session=old_session, category=Expense.CATEGORY_EVENTS, amount='500')
        item = soft_delete_expense(expense.id)
        delete_session('2023-2024')

        self.assertFalse(restore_trash_item(item.id))
        self.assertTrue(TrashItem.objects.filter(pk=item.id).exists())

    def test_restore_into_a_session_added_again_under_the_same_name(self):
        old_session = add_session('2023-2024')
        expense = create_expense(session=old_session, category=Expense.CATEGORY_EVENTS, amount='500')
        item = soft_delete_expense(expense.id)
        delete_session('2023-2024')
        again = add_session('2023-2024')

        self.assertTrue(restore_trash_item(item.id))

        self.assertEqual(Expense.objects.get(pk=expense.id).session, again)
        self.assertFalse(TrashItem.objects.filter(pk=item.id).exists())

    def test_trashed_rows_follow_a_session_rename(self):
        item = soft_delete_student(self.student.id)

        rename_session('2024-2025', '2024-25')

        self.assertEqual(TrashItem.objects.get(pk=item.id).data['fields']['session'], ['2024-25'])
        self.assertTrue(restore_trash_item(item.id))
        self.assertEqual(Student.objects.get(pk=self.student.id).session.name, '2024-25')

    def test_failure_during_restore_keeps_the_trash_item(self):
        item = soft_delete_student(self.student.id)

        with mock.patch.object(TrashItem, 'delete', side_effect=RuntimeError('locked')):
            with self.assertRaises(RuntimeError):
                restore_trash_item(item.id)

        self.assertFalse(Student.objects.filter(pk=self.student.id).exists())
        self.assertTrue(TrashItem.objects.filter(pk=item.id).exists())

    def test_restored_payment_counts_again(self):
        payment = create_payment(student=self.student, fee_structure=self.fee, amount_paid='250.75')
        item = soft_delete_payment(payment.id)

        self.assertTrue(restore_trash_item(item.id))

        restored = PaymentRecord.objects.get(pk=payment.id)
        self.assertEqual(restored.amount_paid, Decimal('250.75'))
        self.assertEqual(restored.student_id, self.student.id)
        self.assertEqual(restored.date, payment.date)


class PurgeAndListTests(RecycleBinBaseTestCase):
    def test_permanent_delete_is_idempotent(self):
        item = soft_delete_student(self.student.id)

        self.assertTrue(permanent_delete_trash_item(item.id))
        self.assertFalse(permanent_delete_trash_item(item.id))
        self.assertFalse(permanent_delete_trash_item('T_never'))
        self.assertFalse(Student.objects.filter(pk=self.student.id).exists())

    def test_list_trash_filters_by_type(self):
        expense = create_expense(category=Expense.CATEGORY_SPORTS, amount='80')
        soft_delete_expense(expense.id)
        soft_delete_student(self.student.id)

        self.assertEqual(list_trash().count(), 2)
        self.assertEqual(list_trash('ALL').count(), 2)
        self.assertEqual(
            [item.item_type for item in list_trash(TrashItem.TYPE_EXPENSE)],
            [TrashItem.TYPE_EXPENSE],
        )

    def test_trashed_students_keep_their_id_reserved(self):
        self.assertEqual(self.student.id, 'ST001')
        soft_delete_student(self.student.id)

        self.assertEqual(next_student_id(), 'ST002')


class TrashViewTests(RecycleBinBaseTestCase):
    def setUp(self):
        super().setUp()
        self.admin = User.objects.create_user(username='admin', password='pass12345', role=User.ROLE_ADMIN)
        self.employee = User.objects.create_user(username='bursar', password='pass12345', role=User.ROLE_EMPLOYEE)
        self.item = soft_delete_student(self.student.id)

    def test_admin_lists_and_restores(self):
        self.client.force_login(self.admin)

        response = self.client.get(reverse('trash_list'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['items'][0]['original_id'], self.student.id)

        response = self.client.post(reverse('trash_restore', args=[self.item.id]))
        self.assertEqual(response.status_code, 200)
        self.assertTrue(Student.objects.filter(pk=self.student.id).exists())

    def test_rejected_restore_is_a_conflict(self):
        create_student(student_id=self.student.id, name='Other', grade='9th', parent_name='P', contact='1')
        self.client.force_login(self.admin)

        response = self.client.post(reverse('trash_restore', args=[self.item.id]))

        self.assertEqual(response.status_code, 409)

    def test_purge_twice(self):
        self.client.force_login(self.admin)

        first = self.client.post(reverse('trash_delete', args=[self.item.id]))
        second = self.client.post(reverse('trash_delete', args=[self.item.id]))

        self.assertEqual(first.json(), {'deleted': True})
        self.assertEqual(second.json(), {'deleted': False})

    def test_employees_cannot_open_the_recycle_bin(self):
        self.client.force_login(self.employee)

        response = self.client.get(reverse('trash_list'))

        self.assertEqual(response.status_code, 403)
