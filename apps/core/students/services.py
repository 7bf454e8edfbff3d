from __future__ import annotations

import logging
import re
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q

from apps.core.recycle_bin.models import TrashItem
from apps.core.schools.models import SchoolProfile

from .models import SchoolClass, Student

logger = logging.getLogger(__name__)

STUDENT_ID_PATTERN = re.compile(r'^ST(\d+)$')


def next_student_id() -> str:
    """Next ST### id, counting students that currently sit in the recycle bin."""
    candidates = list(Student.objects.values_list('id', flat=True))
    candidates += list(
        TrashItem.objects.filter(item_type=TrashItem.TYPE_STUDENT).values_list('original_id', flat=True)
    )

    numbers = [int(match.group(1)) for match in map(STUDENT_ID_PATTERN.match, candidates) if match]
    return f'ST{max(numbers, default=0) + 1:03d}'


def list_students(session, grade=None, search=''):
    students = Student.objects.for_session(session).order_by('id')
    if grade:
        students = students.filter(grade=grade)

    search = (search or '').strip()
    if search:
        students = students.filter(Q(name__icontains=search) | Q(id__icontains=search))
    return list(students)


@transaction.atomic
def create_student(
    *,
    name,
    grade,
    parent_name,
    contact,
    session=None,
    fee_structure_ids=None,
    total_class_fees=None,
    back_fees=None,
    address='',
    date_of_birth=None,
    admission_date=None,
    avatar='',
    student_id=None,
) -> Student:
    session = session or SchoolProfile.load().current_session
    if session is None:
        raise ValidationError('No current session is configured.', code='session_not_found')

    student = Student(
        id=student_id or next_student_id(),
        session=session,
        name=name,
        grade=grade,
        parent_name=parent_name,
        contact=contact,
        address=address or '',
        date_of_birth=date_of_birth,
        admission_date=admission_date,
        avatar=avatar or '',
        fee_structure_ids=list(fee_structure_ids or []),
        total_class_fees=total_class_fees if total_class_fees not in ('', None) else None,
        back_fees=back_fees if back_fees not in ('', None) else Decimal('0.00'),
    )
    student.full_clean()
    student.save(force_insert=True)

    logger.info('Student %s (%s) admitted to session %s', student.id, student.name, session)
    return student


@transaction.atomic
def update_student(student: Student):
    """Full replacement of an existing student. Returns None when the id is unknown."""
    stored_session_id = (
        Student.objects.filter(pk=student.pk).values_list('session_id', flat=True).first()
    )
    if stored_session_id is None:
        logger.warning('Student %s not found for update', student.pk)
        return None

    if stored_session_id != student.session_id:
        raise ValidationError('A student cannot be moved to another session.', code='session_immutable')

    student.full_clean(validate_unique=False)
    student.save(force_update=True)

    logger.info('Student %s updated', student.id)
    return student


def list_classes():
    return list(SchoolClass.objects.values_list('name', flat=True))


def add_class(name) -> SchoolClass:
    school_class = SchoolClass(name=name)
    school_class.clean()

    school_class, created = SchoolClass.objects.get_or_create(name=school_class.name)
    if created:
        logger.info('Class %s added', school_class.name)
    return school_class


def delete_class(name) -> bool:
    deleted, _ = SchoolClass.objects.filter(name=(name or '').strip()).delete()
    if deleted:
        logger.info('Class %s removed', name)
    return bool(deleted)
