from django.http import JsonResponse
from django.views.decorators.http import require_GET

from apps.core.users.decorators import role_required
from apps.core.users.models import User
from apps.core.utils.http import model_payload

from .services import session_dashboard_summary


@role_required([User.ROLE_ADMIN, User.ROLE_EMPLOYEE])
@require_GET
def dashboard(request):
    session = request.current_session
    if session is None:
        return JsonResponse({'error': 'No current session is configured.'}, status=404)

    summary = session_dashboard_summary(session)
    for key in ('last_payment', 'last_expense'):
        if summary[key] is not None:
            summary[key] = model_payload(summary[key])

    return JsonResponse(summary)
