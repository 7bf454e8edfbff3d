from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.core.schools.models import SchoolProfile
from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required
from apps.core.users.models import User
from apps.core.utils.http import validation_error_response

from .forms import SessionNameForm
from .models import AcademicSession
from .services import (
    add_session,
    delete_session,
    linked_record_counts,
    rename_session,
    set_current_session,
    suggest_next_session_name,
)


def _sessions_payload():
    profile = SchoolProfile.load()
    sessions = list(AcademicSession.objects.order_by('-name'))
    return {
        'current_session': profile.current_session.name if profile.current_session_id else None,
        'suggested_name': suggest_next_session_name([session.name for session in sessions]),
        'sessions': [
            {
                'id': session.pk,
                'name': session.name,
                'is_current': session.pk == profile.current_session_id,
                'linked_records': linked_record_counts(session),
            }
            for session in sessions
        ],
    }


def _submitted_name(request):
    form = SessionNameForm(request.POST)
    form.is_valid()
    return form.cleaned_data.get('name', '')


@role_required(User.ROLE_ADMIN)
@require_GET
def session_list(request):
    return JsonResponse(_sessions_payload())


@role_required(User.ROLE_ADMIN)
@require_POST
def session_create(request):
    try:
        session = add_session(_submitted_name(request))
    except ValidationError as exc:
        return validation_error_response(exc)

    log_audit_event(request=request, action='sessions.session_added', target=session, details=f"Name={session.name}")
    return JsonResponse(_sessions_payload(), status=201)


@role_required(User.ROLE_ADMIN)
@require_POST
def session_rename(request, pk):
    session = get_object_or_404(AcademicSession, pk=pk)
    previous = session.name

    try:
        session = rename_session(previous, _submitted_name(request))
    except ValidationError as exc:
        return validation_error_response(exc)

    log_audit_event(
        request=request,
        action='sessions.session_renamed',
        target=session,
        details=f"From={previous}, To={session.name}",
    )
    return JsonResponse(_sessions_payload())


@role_required(User.ROLE_ADMIN)
@require_POST
def session_activate(request, pk):
    session = get_object_or_404(AcademicSession, pk=pk)
    set_current_session(session.name)

    log_audit_event(request=request, action='sessions.session_activated', target=session, details=f"Name={session.name}")
    return JsonResponse(_sessions_payload())


@role_required(User.ROLE_ADMIN)
@require_POST
def session_delete(request, pk):
    session = get_object_or_404(AcademicSession, pk=pk)

    try:
        deleted_name = delete_session(session.name)
    except ValidationError as exc:
        return validation_error_response(exc)

    log_audit_event(request=request, action='sessions.session_deleted', details=f"Name={deleted_name}")
    return JsonResponse(_sessions_payload())
