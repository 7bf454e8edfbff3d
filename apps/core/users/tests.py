from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

from apps.core.academic_sessions.services import add_session
from apps.core.students.services import create_student

from .models import AuditLog, User


class UserModelTests(TestCase):
    def setUp(self):
        self.user_model = get_user_model()

    def test_superusers_are_admins(self):
        user = self.user_model.objects.create_superuser('root', 'root@example.com', 'pass12345')

        self.assertEqual(user.role, User.ROLE_ADMIN)

    def test_new_users_default_to_employee(self):
        user = self.user_model.objects.create_user(username='bursar', password='pass12345')

        self.assertEqual(user.role, User.ROLE_EMPLOYEE)

    def test_student_users_need_a_student_record(self):
        with self.assertRaises(ValueError):
            self.user_model.objects.create_user(username='orphan', password='pass12345', role=User.ROLE_STUDENT)


class RoleAccessTests(TestCase):
    def setUp(self):
        add_session('2024-2025')
        self.student = create_student(name='Alice Johnson', grade='10th', parent_name='Robert', contact='555')
        self.student_user = User.objects.create_user(
            username='alice',
            password='pass12345',
            role=User.ROLE_STUDENT,
            student=self.student,
        )

    def test_anonymous_users_get_401(self):
        response = self.client.get(reverse('current_user'))

        self.assertEqual(response.status_code, 401)

    def test_current_user(self):
        self.client.force_login(self.student_user)

        response = self.client.get(reverse('current_user'))

        self.assertEqual(response.json(), {
            'username': 'alice',
            'role': User.ROLE_STUDENT,
            'student_id': self.student.id,
            'current_session': '2024-2025',
        })

    def test_role_outside_the_allowed_set_gets_403(self):
        self.client.force_login(self.student_user)

        response = self.client.get(reverse('session_list'))

        self.assertEqual(response.status_code, 403)


class AuditTrailTests(TestCase):
    def setUp(self):
        add_session('2024-2025')
        self.admin = User.objects.create_user(username='admin', password='pass12345', role=User.ROLE_ADMIN)

    def test_login_and_logout_are_audited(self):
        self.assertTrue(self.client.login(username='admin', password='pass12345'))
        self.client.logout()

        actions = list(AuditLog.objects.order_by('id').values_list('action', flat=True))
        self.assertEqual(actions, ['user.login', 'user.logout'])

    def test_mutations_are_audited(self):
        self.client.force_login(self.admin)

        self.client.post(reverse('session_create'), {'name': '2025-2026'})

        entry = AuditLog.objects.get(action='sessions.session_added')
        self.assertEqual(entry.user, self.admin)
        self.assertEqual(entry.target_model, 'AcademicSession')
        self.assertEqual(entry.method, 'POST')
