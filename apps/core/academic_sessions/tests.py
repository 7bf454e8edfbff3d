from datetime import date

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase
from django.urls import reverse

from apps.core.academic_sessions.models import AcademicSession
from apps.core.expenses.models import Expense
from apps.core.expenses.services import create_expense
from apps.core.fees.services import create_fee_structure, create_payment
from apps.core.recycle_bin.services import soft_delete_expense, soft_delete_payment, soft_delete_student
from apps.core.schools.models import SchoolProfile
from apps.core.schools.signals import profile_changed
from apps.core.students.services import create_student
from apps.core.users.models import User

from .services import (
    add_session,
    delete_session,
    linked_record_counts,
    rename_session,
    set_current_session,
    suggest_next_session_name,
)


class SignalRecorder:
    def __init__(self):
        self.profiles = []

    def __call__(self, sender, profile, **kwargs):
        self.profiles.append(profile)


class SuggestSessionNameTests(SimpleTestCase):
    def test_increments_both_years_of_the_newest_session(self):
        self.assertEqual(suggest_next_session_name(['2024-2025', '2023-2024']), '2025-2026')
        self.assertEqual(suggest_next_session_name(['Session 2024 / 2025']), '2025-2026')

    def test_falls_back_to_the_current_year(self):
        self.assertEqual(suggest_next_session_name([], today=date(2026, 10, 19)), '2026-2027')
        self.assertEqual(suggest_next_session_name(['Spring'], today=date(2026, 1, 5)), '2026-2027')


class SessionManagerTests(TestCase):
    def setUp(self):
        self.recorder = SignalRecorder()
        profile_changed.connect(self.recorder)
        self.addCleanup(profile_changed.disconnect, self.recorder)

        self.session = add_session('2024-2025')

    def test_first_session_becomes_current(self):
        self.assertEqual(SchoolProfile.load().current_session, self.session)
        self.assertEqual(len(self.recorder.profiles), 1)

        add_session('2025-2026')
        self.assertEqual(SchoolProfile.load().current_session, self.session)

    def test_names_are_trimmed_and_unique(self):
        with self.assertRaises(ValidationError) as ctx:
            add_session(' 2024-2025 ')
        self.assertEqual(ctx.exception.code, 'duplicate_session')

        with self.assertRaises(ValidationError) as ctx:
            add_session('   ')
        self.assertEqual(ctx.exception.code, 'invalid_session_name')

        self.assertEqual(AcademicSession.objects.count(), 1)
        self.assertEqual(len(self.recorder.profiles), 1)

    def test_rename_keeps_records_and_current_pointer(self):
        student = create_student(name='Alice', grade='10th', parent_name='Robert', contact='555')

        rename_session('2024-2025', '2024-25')

        student.refresh_from_db()
        self.assertEqual(student.session.name, '2024-25')
        self.assertEqual(SchoolProfile.load().current_session.name, '2024-25')
        self.assertEqual(len(self.recorder.profiles), 2)

    def test_rename_conflicts(self):
        add_session('2025-2026')

        with self.assertRaises(ValidationError) as ctx:
            rename_session('2024-2025', '2025-2026')
        self.assertEqual(ctx.exception.code, 'session_name_conflict')

        with self.assertRaises(ValidationError) as ctx:
            rename_session('1999-2000', '2000-2001')
        self.assertEqual(ctx.exception.code, 'session_not_found')

    def test_set_current_session(self):
        next_session = add_session('2025-2026')

        set_current_session('2025-2026')

        self.assertEqual(SchoolProfile.load().current_session, next_session)
        with self.assertRaises(ValidationError) as ctx:
            set_current_session('2030-2031')
        self.assertEqual(ctx.exception.code, 'session_not_found')

    def test_current_session_cannot_be_deleted(self):
        with self.assertRaises(ValidationError) as ctx:
            delete_session('2024-2025')

        self.assertEqual(ctx.exception.code, 'cannot_delete_active_session')
        self.assertTrue(AcademicSession.objects.filter(name='2024-2025').exists())

    def test_empty_session_is_deleted(self):
        add_session('2023-2024')
        notifications = len(self.recorder.profiles)

        self.assertEqual(delete_session('2023-2024'), '2023-2024')

        self.assertFalse(AcademicSession.objects.filter(name='2023-2024').exists())
        self.assertEqual(len(self.recorder.profiles), notifications + 1)

    def test_linked_payment_blocks_deletion_until_it_is_trashed(self):
        old = add_session('2023-2024')
        fee = create_fee_structure(fee_id='F_OLD', name='Class fees', amount='3000', session=old)
        student = create_student(
            session=old,
            name='Alice',
            grade='10th',
            parent_name='Robert',
            contact='555',
            fee_structure_ids=['F_OLD'],
        )
        payment = create_payment(student=student, fee_structure=fee, amount_paid='100')
        expense = create_expense(session=old, category=Expense.CATEGORY_EVENTS, amount='50')

        with self.assertRaises(ValidationError) as ctx:
            delete_session('2023-2024')
        self.assertEqual(ctx.exception.code, 'session_has_linked_data')
        self.assertEqual(ctx.exception.params, {
            'students': 1,
            'payments': 1,
            'fee_structures': 1,
            'expenses': 1,
        })
        self.assertIn('1 Students, 1 Payments, 1 Fee Structures, 1 Expenses', ctx.exception.message)

        soft_delete_student(student.id)
        soft_delete_expense(expense.id)
        fee.delete()
        self.assertEqual(linked_record_counts(old)['payments'], 1)

        soft_delete_payment(payment.id)
        self.assertEqual(linked_record_counts(old), {
            'students': 0,
            'payments': 0,
            'fee_structures': 0,
            'expenses': 0,
        })

        delete_session('2023-2024')
        self.assertFalse(AcademicSession.objects.filter(name='2023-2024').exists())


class SessionViewTests(TestCase):
    def setUp(self):
        self.current = add_session('2024-2025')
        self.admin = User.objects.create_user(username='admin', password='pass12345', role=User.ROLE_ADMIN)
        self.employee = User.objects.create_user(username='bursar', password='pass12345', role=User.ROLE_EMPLOYEE)

    def test_list_suggests_the_next_name(self):
        self.client.force_login(self.admin)

        response = self.client.get(reverse('session_list'))

        body = response.json()
        self.assertEqual(body['current_session'], '2024-2025')
        self.assertEqual(body['suggested_name'], '2025-2026')
        self.assertTrue(body['sessions'][0]['is_current'])

    def test_add_rename_activate_and_delete(self):
        self.client.force_login(self.admin)

        response = self.client.post(reverse('session_create'), {'name': '2025-2026'})
        self.assertEqual(response.status_code, 201)
        created = AcademicSession.objects.get(name='2025-2026')

        response = self.client.post(reverse('session_rename', args=[created.pk]), {'name': '2025-26'})
        self.assertEqual(response.status_code, 200)

        response = self.client.post(reverse('session_activate', args=[created.pk]))
        self.assertEqual(response.json()['current_session'], '2025-26')

        response = self.client.post(reverse('session_delete', args=[self.current.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(AcademicSession.objects.filter(pk=self.current.pk).exists())

    def test_guard_failures_are_reported_with_their_code(self):
        self.client.force_login(self.admin)

        duplicate = self.client.post(reverse('session_create'), {'name': '2024-2025'})
        active = self.client.post(reverse('session_delete', args=[self.current.pk]))

        self.assertEqual(duplicate.status_code, 400)
        self.assertEqual(duplicate.json()['code'], 'duplicate_session')
        self.assertEqual(active.status_code, 400)
        self.assertEqual(active.json()['code'], 'cannot_delete_active_session')

    def test_employees_cannot_manage_sessions(self):
        self.client.force_login(self.employee)

        response = self.client.post(reverse('session_create'), {'name': '2025-2026'})

        self.assertEqual(response.status_code, 403)
        self.assertFalse(AcademicSession.objects.filter(name='2025-2026').exists())
