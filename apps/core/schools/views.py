from django.forms.models import model_to_dict
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required
from apps.core.users.models import User
from apps.core.utils.http import form_error_response

from .forms import SchoolProfileForm
from .services import PROFILE_FIELDS, get_school_profile, update_school_profile


def _profile_payload(profile):
    payload = model_to_dict(profile, fields=PROFILE_FIELDS)
    payload['current_session'] = profile.current_session.name if profile.current_session_id else None
    payload['sessions'] = profile.sessions
    return payload


@role_required([User.ROLE_ADMIN, User.ROLE_EMPLOYEE, User.ROLE_STUDENT])
@require_GET
def profile_detail(request):
    return JsonResponse(_profile_payload(get_school_profile()))


@role_required(User.ROLE_ADMIN)
@require_POST
def profile_update(request):
    profile = get_school_profile()
    submitted = [name for name in PROFILE_FIELDS if name in request.POST]

    # Fields left out of the request keep their stored values.
    data = model_to_dict(profile, fields=PROFILE_FIELDS)
    data.update((name, request.POST[name]) for name in submitted)

    form = SchoolProfileForm(data, instance=profile)
    if not form.is_valid():
        return form_error_response(form)

    profile = update_school_profile(profile, **{name: form.cleaned_data[name] for name in submitted})
    log_audit_event(
        request=request,
        action='schools.profile_updated',
        target=profile,
        details=f"Fields={', '.join(submitted) or 'none'}",
    )
    return JsonResponse(_profile_payload(profile))
