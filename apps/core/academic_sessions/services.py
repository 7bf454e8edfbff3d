import logging
import re

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.core.academic_sessions.models import AcademicSession
from apps.core.schools.models import SchoolProfile
from apps.core.schools.signals import notify_profile_changed

logger = logging.getLogger(__name__)

SESSION_YEARS_PATTERN = re.compile(r'(\d{4}).*?(\d{4})')


def _clean_name(name) -> str:
    cleaned = (name or '').strip()
    if not cleaned:
        raise ValidationError('Session name is required.', code='invalid_session_name')
    return cleaned


def get_session(name) -> AcademicSession:
    session = AcademicSession.objects.filter(name=(name or '').strip()).first()
    if session is None:
        raise ValidationError(f'Session {name} does not exist.', code='session_not_found')
    return session


def resolve_session(session=None) -> AcademicSession:
    """The given session, else the profile's current one."""
    session = session or SchoolProfile.load().current_session
    if session is None:
        raise ValidationError('No current session is configured.', code='session_not_found')
    return session


def session_names():
    return list(AcademicSession.objects.values_list('name', flat=True))


@transaction.atomic
def add_session(name) -> AcademicSession:
    name = _clean_name(name)
    if AcademicSession.objects.filter(name=name).exists():
        logger.warning('Rejected duplicate session %s', name)
        raise ValidationError('Session already exists.', code='duplicate_session')

    session = AcademicSession.objects.create(name=name)

    profile = SchoolProfile.load()
    if profile.current_session_id is None:
        profile.current_session = session
        profile.save(update_fields=['current_session', 'updated_at'])

    logger.info('Session %s added', name)
    notify_profile_changed(profile)
    return session


def suggest_next_session_name(names=None, today=None) -> str:
    """Suggest the label following the newest session; never writes."""
    names = session_names() if names is None else list(names)
    match = SESSION_YEARS_PATTERN.search(names[0]) if names else None
    if match:
        return f'{int(match.group(1)) + 1}-{int(match.group(2)) + 1}'

    year = (today or timezone.localdate()).year
    return f'{year}-{year + 1}'


def _relabel_trashed_rows(old_name, new_name):
    # Recycle bin snapshots name their session by label.
    from apps.core.recycle_bin.models import TrashItem

    relabelled = []
    for item in TrashItem.objects.all():
        fields = item.data.get('fields', {})
        if fields.get('session') == [old_name]:
            fields['session'] = [new_name]
            relabelled.append(item)

    if relabelled:
        TrashItem.objects.bulk_update(relabelled, ['data'])
    return len(relabelled)


@transaction.atomic
def rename_session(old_name, new_name) -> AcademicSession:
    session = get_session(old_name)
    new_name = _clean_name(new_name)

    if new_name != session.name and AcademicSession.objects.filter(name=new_name).exists():
        logger.warning('Rejected rename of %s to existing name %s', session.name, new_name)
        raise ValidationError('Session name already exists.', code='session_name_conflict')

    previous = session.name
    if new_name != previous:
        session.name = new_name
        session.save(update_fields=['name'])
        _relabel_trashed_rows(previous, new_name)

    # The profile points at the row, so a renamed current session stays current.
    profile = SchoolProfile.load()
    logger.info('Session %s renamed to %s', previous, new_name)
    notify_profile_changed(profile)
    return session


@transaction.atomic
def set_current_session(name) -> AcademicSession:
    session = get_session(name)

    profile = SchoolProfile.load()
    if profile.current_session_id != session.id:
        profile.current_session = session
        profile.save(update_fields=['current_session', 'updated_at'])

    logger.info('Current session set to %s', session.name)
    notify_profile_changed(profile)
    return session


def linked_record_counts(session: AcademicSession):
    """Active rows referencing the session; recycle bin snapshots are not counted."""
    from apps.core.expenses.models import Expense
    from apps.core.fees.models import FeeStructure, PaymentRecord
    from apps.core.students.models import Student

    return {
        'students': Student.objects.for_session(session).count(),
        'payments': PaymentRecord.objects.for_session(session).count(),
        'fee_structures': FeeStructure.objects.for_session(session).count(),
        'expenses': Expense.objects.for_session(session).count(),
    }


LINKED_LABELS = (
    ('students', 'Students'),
    ('payments', 'Payments'),
    ('fee_structures', 'Fee Structures'),
    ('expenses', 'Expenses'),
)


@transaction.atomic
def delete_session(name):
    session = get_session(name)
    profile = SchoolProfile.load()

    if profile.current_session_id == session.id:
        logger.warning('Rejected delete of active session %s', session.name)
        raise ValidationError('Cannot delete the active session.', code='cannot_delete_active_session')

    counts = linked_record_counts(session)
    if any(counts.values()):
        details = ', '.join(
            f'{counts[key]} {label}'
            for key, label in LINKED_LABELS
            if counts[key]
        )
        logger.warning('Rejected delete of session %s with linked data: %s', session.name, details)
        raise ValidationError(
            f'Cannot delete session. Found linked data: {details}. Please delete these records first.',
            code='session_has_linked_data',
            params=counts,
        )

    deleted_name = session.name
    session.delete()

    logger.info('Session %s deleted', deleted_name)
    notify_profile_changed(profile)
    return deleted_name
