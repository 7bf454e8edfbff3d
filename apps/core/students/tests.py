from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse

from apps.core.academic_sessions.services import add_session
from apps.core.fees.services import create_fee_structure, create_payment
from apps.core.schools.models import SchoolProfile
from apps.core.users.models import User

from .models import SchoolClass, Student
from .services import (
    add_class,
    create_student,
    delete_class,
    list_classes,
    list_students,
    next_student_id,
    update_student,
)


def _admit(**overrides):
    values = {
        'name': 'Alice Johnson',
        'grade': '10th',
        'parent_name': 'Robert Johnson',
        'contact': '555-0101',
    }
    values.update(overrides)
    return create_student(**values)


class StudentServiceTests(TestCase):
    def setUp(self):
        self.session = add_session('2024-2025')

    def test_ids_follow_the_st_sequence(self):
        self.assertEqual(next_student_id(), 'ST001')

        first = _admit()
        second = _admit(name='Bob Smith')
        Student.objects.create(id='LEGACY-9', session=self.session, name='X', grade='1st', parent_name='Y', contact='1')

        self.assertEqual([first.id, second.id], ['ST001', 'ST002'])
        self.assertEqual(next_student_id(), 'ST003')

    def test_create_defaults_to_current_session(self):
        student = _admit()

        self.assertEqual(student.session, self.session)
        self.assertEqual(student.back_fees, Decimal('0.00'))
        self.assertIsNone(student.total_class_fees)
        self.assertEqual(student.fee_structure_ids, [])

    def test_create_without_a_current_session_fails(self):
        profile = SchoolProfile.load()
        profile.current_session = None
        profile.save()

        with self.assertRaises(ValidationError) as ctx:
            _admit()

        self.assertEqual(ctx.exception.code, 'session_not_found')
        self.assertFalse(Student.objects.exists())

    def test_fee_structure_ids_keep_order_without_duplicates(self):
        student = _admit(fee_structure_ids=['F_CLASS', 'F_EXAM', 'F_CLASS'])

        self.assertEqual(student.fee_structure_ids, ['F_CLASS', 'F_EXAM'])

    def test_required_fields_and_negative_amounts_are_rejected(self):
        with self.assertRaises(ValidationError):
            _admit(name='   ')
        with self.assertRaises(ValidationError):
            _admit(back_fees='-5')

        self.assertFalse(Student.objects.exists())

    def test_update_replaces_the_row(self):
        student = _admit()
        student.grade = '11th'
        student.back_fees = Decimal('300')

        self.assertIsNotNone(update_student(student))

        student.refresh_from_db()
        self.assertEqual(student.grade, '11th')
        self.assertEqual(student.back_fees, Decimal('300.00'))

    def test_update_of_unknown_student_returns_none(self):
        ghost = Student(id='ST404', session=self.session, name='Ghost', grade='1st', parent_name='P', contact='1')

        self.assertIsNone(update_student(ghost))
        self.assertFalse(Student.objects.filter(pk='ST404').exists())

    def test_session_cannot_change(self):
        student = _admit()
        student.session = add_session('2025-2026')

        with self.assertRaises(ValidationError) as ctx:
            update_student(student)

        self.assertEqual(ctx.exception.code, 'session_immutable')
        self.assertEqual(Student.objects.get(pk=student.id).session, self.session)

    def test_list_students_is_session_scoped(self):
        _admit()
        _admit(name='Bob Smith', grade='8th')
        other = add_session('2023-2024')
        _admit(name='Old Timer', session=other)

        self.assertEqual([s.name for s in list_students(self.session)], ['Alice Johnson', 'Bob Smith'])
        self.assertEqual([s.name for s in list_students(self.session, grade='8th')], ['Bob Smith'])
        self.assertEqual([s.name for s in list_students(self.session, search='ali')], ['Alice Johnson'])

    def test_classes_are_sorted_and_unique(self):
        add_class('9th')
        add_class(' 10th ')
        add_class('9th')

        self.assertEqual(list_classes(), ['10th', '9th'])
        self.assertEqual(SchoolClass.objects.count(), 2)

        self.assertTrue(delete_class('9th'))
        self.assertFalse(delete_class('9th'))
        self.assertEqual(list_classes(), ['10th'])


class StudentViewTests(TestCase):
    def setUp(self):
        add_session('2024-2025')
        self.fee = create_fee_structure(fee_id='F_CLASS', name='Class fees', amount='3000')
        create_fee_structure(fee_id='F_EXAM', name='Exam fees', amount='500')
        self.student = _admit(fee_structure_ids=['F_CLASS'])
        create_payment(student=self.student, fee_structure=self.fee, amount_paid='1000')

        self.admin = User.objects.create_user(username='admin', password='pass12345', role=User.ROLE_ADMIN)
        self.employee = User.objects.create_user(username='bursar', password='pass12345', role=User.ROLE_EMPLOYEE)
        self.student_user = User.objects.create_user(
            username='alice',
            password='pass12345',
            role=User.ROLE_STUDENT,
            student=self.student,
        )

    def test_list_includes_ledger_summary(self):
        self.client.force_login(self.employee)

        response = self.client.get(reverse('student_list'))

        self.assertEqual(response.status_code, 200)
        summary = response.json()['students'][0]['summary']
        self.assertEqual(summary['total'], '3000.00')
        self.assertEqual(summary['paid'], '1000.00')
        self.assertEqual(summary['due'], '2000.00')

    def test_create_keeps_the_submitted_fee_order(self):
        self.client.force_login(self.employee)

        response = self.client.post(reverse('student_create'), {
            'name': 'Bob Smith',
            'grade': '8th',
            'parent_name': 'Sarah Smith',
            'contact': '555-0102',
            'fee_structure_ids': ['F_EXAM', 'F_CLASS'],
        })

        self.assertEqual(response.status_code, 201)
        student = Student.objects.get(pk='ST002')
        self.assertEqual(student.fee_structure_ids, ['F_EXAM', 'F_CLASS'])

    def test_create_reports_form_errors(self):
        self.client.force_login(self.employee)

        response = self.client.post(reverse('student_create'), {'name': 'Nameless'})

        self.assertEqual(response.status_code, 400)
        self.assertIn('grade', response.json()['errors'])

    def test_update(self):
        self.client.force_login(self.employee)

        response = self.client.post(reverse('student_update', args=[self.student.id]), {
            'name': 'Alice J.',
            'grade': '11th',
            'parent_name': 'Robert Johnson',
            'contact': '555-0101',
            'fee_structure_ids': ['F_CLASS'],
            'total_class_fees': '2800',
        })

        self.assertEqual(response.status_code, 200)
        self.student.refresh_from_db()
        self.assertEqual(self.student.grade, '11th')
        self.assertEqual(self.student.total_class_fees, Decimal('2800.00'))

    def test_only_admin_deletes_students(self):
        self.client.force_login(self.employee)
        self.assertEqual(self.client.post(reverse('student_delete', args=[self.student.id])).status_code, 403)

        self.client.force_login(self.admin)
        response = self.client.post(reverse('student_delete', args=[self.student.id]))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Student.objects.filter(pk=self.student.id).exists())

    def test_students_read_only_their_own_balance(self):
        other = _admit(name='Bob Smith')
        self.client.force_login(self.student_user)

        own = self.client.get(reverse('student_balance', args=[self.student.id]))
        foreign = self.client.get(reverse('student_balance', args=[other.id]))

        self.assertEqual(own.status_code, 200)
        self.assertEqual(own.json()['due'], '2000.00')
        self.assertEqual(foreign.status_code, 403)

    def test_fee_line_balance(self):
        self.client.force_login(self.employee)

        response = self.client.get(reverse('fee_line_balance', args=[self.student.id, 'F_CLASS']))

        self.assertEqual(response.json()['paid'], '1000.00')

    def test_class_management(self):
        self.client.force_login(self.admin)

        response = self.client.post(reverse('class_create'), {'name': '10th'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['classes'], ['10th'])

        response = self.client.post(reverse('class_delete', args=['10th']))
        self.assertEqual(response.json()['classes'], [])
