import random
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from faker import Faker

from apps.core.academic_sessions.models import AcademicSession
from apps.core.expenses.models import Expense
from apps.core.fees.models import FeeStructure, PaymentRecord
from apps.core.schools.models import SchoolProfile
from apps.core.schools.signals import notify_profile_changed
from apps.core.students.models import SchoolClass, Student
from apps.core.students.services import create_student, next_student_id
from apps.core.users.models import User

SESSION_NAME = '2024-2025'

CLASSES = ['P.G', 'Nursery', 'KG', '1st', '2nd', '3rd', '4th', '5th', '6th', '7th', '8th', '9th', '10th', '11th', '12th']

FEE_STRUCTURES = [
    ('F_ADM_PG8', 'Admission P.G to 8th', '5000', '2024-04-15'),
    ('F_REG_910', 'Registration 9th & 10th', '2500', '2024-04-15'),
    ('F_CLASS', 'Class fees', '3000', '2024-05-10'),
    ('F_INST', 'Instalments', '8000', '2024-08-10'),
    ('F_EXAM', 'Exam fees', '500', '2024-09-01'),
    ('F_BACK', 'Back year fees', '0', '2024-04-01'),
    ('F_ID', 'Id proof fees', '150', '2024-04-20'),
    ('F_UNI', 'Uniform and book fees', '4500', '2024-04-10'),
    ('F_TRANS', 'Transport fees', '1200', '2024-05-01'),
    ('F_UNK', 'Unknown', '0', '2024-12-31'),
]

STUDENTS = [
    ('ST001', 'Alice Johnson', '10th', 'Robert Johnson', '555-0101', ['F_REG_910', 'F_CLASS', 'F_EXAM', 'F_ID']),
    ('ST002', 'Bob Smith', '8th', 'Sarah Smith', '555-0102', ['F_ADM_PG8', 'F_CLASS', 'F_UNI', 'F_TRANS']),
    ('ST003', 'Charlie Brown', '11th', 'Lucy Brown', '555-0103', ['F_CLASS', 'F_TRANS', 'F_INST']),
    ('ST004', 'Diana Prince', '12th', 'Hippolyta', '555-0104', ['F_CLASS', 'F_EXAM', 'F_TRANS', 'F_ID']),
    ('ST005', 'Evan Wright', '9th', 'John Wright', '555-0105', ['F_REG_910', 'F_CLASS']),
]

PAYMENTS = [
    ('P001', 'ST001', 'F_CLASS', '1500', '2024-08-02', PaymentRecord.METHOD_ONLINE),
    ('P002', 'ST001', 'F_ID', '150', '2024-08-02', PaymentRecord.METHOD_ONLINE),
    ('P003', 'ST002', 'F_ADM_PG8', '5000', '2024-07-28', PaymentRecord.METHOD_CHEQUE),
    ('P004', 'ST003', 'F_CLASS', '1000', '2024-08-05', PaymentRecord.METHOD_CASH),
    ('P005', 'ST004', 'F_CLASS', '3000', '2024-08-01', PaymentRecord.METHOD_ONLINE),
    ('P006', 'ST004', 'F_EXAM', '500', '2024-09-10', PaymentRecord.METHOD_ONLINE),
]

EXPENSES = [
    ('E001', Expense.CATEGORY_SALARIES, 'Monthly staff salaries', '45000', '2024-09-01'),
    ('E002', Expense.CATEGORY_UTILITIES, 'Electricity bill for August', '3200', '2024-09-05'),
    ('E003', Expense.CATEGORY_MAINTENANCE, 'Plumbing repairs in block A', '1500', '2024-09-10'),
    ('E004', Expense.CATEGORY_SUPPLIES, 'Office stationery and markers', '2100', '2024-09-12'),
    ('E005', Expense.CATEGORY_EVENTS, 'Teachers Day celebration', '5000', '2024-09-15'),
]


class Command(BaseCommand):
    help = 'Seeds the database with the demo school, its 2024-2025 session and sample ledger data.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--students',
            type=int,
            default=0,
            help='Number of additional random students to admit.',
        )
        parser.add_argument('--seed', type=int, default=None, help='Faker/random seed for repeatable data.')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding database...')

        fake = Faker('en_IN')
        if options['seed'] is not None:
            Faker.seed(options['seed'])
            random.seed(options['seed'])

        session, created = AcademicSession.objects.get_or_create(name=SESSION_NAME)
        if created:
            self.stdout.write(self.style.SUCCESS(f'Created session {session.name}'))

        profile = SchoolProfile.load()
        if profile.current_session_id is None:
            profile.current_session = session
            profile.save(update_fields=['current_session', 'updated_at'])
            notify_profile_changed(profile)

        for name in CLASSES:
            SchoolClass.objects.get_or_create(name=name)

        for fee_id, name, amount, due_date in FEE_STRUCTURES:
            FeeStructure.objects.get_or_create(
                id=fee_id,
                defaults={'session': session, 'name': name, 'amount': Decimal(amount), 'due_date': due_date},
            )

        for student_id, name, grade, parent_name, contact, fee_ids in STUDENTS:
            _, created = Student.objects.get_or_create(
                id=student_id,
                defaults={
                    'session': session,
                    'name': name,
                    'grade': grade,
                    'parent_name': parent_name,
                    'contact': contact,
                    'fee_structure_ids': fee_ids,
                },
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f'Admitted student {student_id} {name}'))

        for payment_id, student_id, fee_id, amount, paid_on, method in PAYMENTS:
            PaymentRecord.objects.get_or_create(
                id=payment_id,
                defaults={
                    'session': session,
                    'student_id': student_id,
                    'fee_structure_id': fee_id,
                    'amount_paid': Decimal(amount),
                    'date': paid_on,
                    'method': method,
                },
            )

        for expense_id, category, description, amount, spent_on in EXPENSES:
            Expense.objects.get_or_create(
                id=expense_id,
                defaults={
                    'session': session,
                    'category': category,
                    'description': description,
                    'amount': Decimal(amount),
                    'date': spent_on,
                },
            )

        fee_choices = [fee_id for fee_id, _, amount, _ in FEE_STRUCTURES if Decimal(amount) > 0]
        for _ in range(options['students']):
            student = create_student(
                student_id=next_student_id(),
                session=session,
                name=fake.name(),
                grade=random.choice(CLASSES),
                parent_name=fake.name(),
                contact=fake.phone_number()[:30],
                address=fake.address(),
                date_of_birth=fake.date_of_birth(minimum_age=3, maximum_age=18),
                fee_structure_ids=random.sample(fee_choices, k=3),
            )
            self.stdout.write(self.style.SUCCESS(f'Admitted student {student.id} {student.name}'))

        self._ensure_user('admin', User.ROLE_ADMIN, is_staff=True)
        self._ensure_user('bursar', User.ROLE_EMPLOYEE)
        self._ensure_user('alice', User.ROLE_STUDENT, student_id='ST001')

        self.stdout.write(self.style.SUCCESS('Database seeding complete!'))

    def _ensure_user(self, username, role, **extra):
        user, created = User.objects.get_or_create(username=username, defaults={'role': role, **extra})
        if created:
            user.set_password('password')
            user.save()
            self.stdout.write(self.style.SUCCESS(f'Created {role} user {username}'))
        return user
