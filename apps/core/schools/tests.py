from io import StringIO

from django.core.management import call_command
from django.test import RequestFactory, TestCase
from django.urls import reverse

from apps.core.academic_sessions.services import add_session
from apps.core.expenses.models import Expense
from apps.core.fees.models import FeeStructure, PaymentRecord
from apps.core.fees.services import student_balance
from apps.core.students.models import Student
from apps.core.users.models import User

from .middleware import CurrentSessionMiddleware
from .models import DEFAULT_FEES_RECEIPT_TERMS, SchoolProfile
from .services import update_school_profile
from .signals import profile_changed


class SchoolProfileTests(TestCase):
    def test_profile_is_a_single_row_with_defaults(self):
        profile = SchoolProfile.load()

        self.assertEqual(profile.name, 'The Education Hills')
        self.assertEqual(profile.fees_receipt_terms, DEFAULT_FEES_RECEIPT_TERMS)
        self.assertEqual(len(profile.slider_images), 3)
        self.assertIsNone(profile.current_session)
        self.assertEqual(profile.sessions, [])

        SchoolProfile(name='Another').save()
        self.assertEqual(SchoolProfile.objects.count(), 1)
        self.assertEqual(SchoolProfile.load().name, 'Another')

    def test_update_notifies_subscribers(self):
        received = []

        def receiver(sender, profile, **kwargs):
            received.append(profile.tagline)

        profile_changed.connect(receiver)
        self.addCleanup(profile_changed.disconnect, receiver)

        update_school_profile(tagline='Learning for life')

        self.assertEqual(received, ['Learning for life'])
        self.assertEqual(SchoolProfile.load().tagline, 'Learning for life')

    def test_unknown_fields_are_refused(self):
        with self.assertRaises(TypeError):
            update_school_profile(current_session=None)


class CurrentSessionMiddlewareTests(TestCase):
    def setUp(self):
        self.current = add_session('2024-2025')
        self.previous = add_session('2023-2024')
        self.middleware = CurrentSessionMiddleware(lambda request: request)
        self.factory = RequestFactory()

    def test_defaults_to_the_profile_session(self):
        request = self.middleware(self.factory.get('/'))

        self.assertEqual(request.current_session, self.current)
        self.assertEqual(request.school_profile.pk, SchoolProfile.SINGLETON_PK)

    def test_query_parameter_selects_another_session(self):
        request = self.middleware(self.factory.get('/', {'session': '2023-2024'}))
        self.assertEqual(request.current_session, self.previous)

        request = self.middleware(self.factory.get('/', {'session': 'no-such-session'}))
        self.assertEqual(request.current_session, self.current)


class SchoolProfileViewTests(TestCase):
    def setUp(self):
        add_session('2024-2025')
        self.admin = User.objects.create_user(username='admin', password='pass12345', role=User.ROLE_ADMIN)
        self.employee = User.objects.create_user(username='bursar', password='pass12345', role=User.ROLE_EMPLOYEE)

    def test_any_signed_in_user_reads_the_profile(self):
        self.client.force_login(self.employee)

        response = self.client.get(reverse('school_profile'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['current_session'], '2024-2025')
        self.assertEqual(response.json()['sessions'], ['2024-2025'])

    def test_admin_updates_only_submitted_fields(self):
        self.client.force_login(self.admin)

        response = self.client.post(reverse('school_profile_update'), {'phone': '+91 98765 43210'})

        self.assertEqual(response.status_code, 200)
        profile = SchoolProfile.load()
        self.assertEqual(profile.phone, '+91 98765 43210')
        self.assertEqual(profile.name, 'The Education Hills')
        self.assertEqual(len(profile.slider_images), 3)

    def test_employee_cannot_update(self):
        self.client.force_login(self.employee)

        response = self.client.post(reverse('school_profile_update'), {'name': 'Hijacked'})

        self.assertEqual(response.status_code, 403)


class SeedCommandTests(TestCase):
    def test_seed_creates_the_demo_ledger(self):
        call_command('seed', students=2, seed=7, stdout=StringIO())

        self.assertEqual(SchoolProfile.load().current_session.name, '2024-2025')
        self.assertEqual(FeeStructure.objects.count(), 10)
        self.assertEqual(Student.objects.count(), 7)
        self.assertEqual(PaymentRecord.objects.count(), 6)
        self.assertEqual(Expense.objects.count(), 5)
        self.assertTrue(User.objects.filter(username='alice', role=User.ROLE_STUDENT, student_id='ST001').exists())

        # Registration 2500 + class 3000 + exam 500 + id proof 150, paid 1650.
        self.assertEqual(str(student_balance('ST001')['due']), '4500.00')

    def test_seed_is_repeatable(self):
        call_command('seed', stdout=StringIO())
        call_command('seed', stdout=StringIO())

        self.assertEqual(Student.objects.count(), 5)
        self.assertEqual(PaymentRecord.objects.count(), 6)
