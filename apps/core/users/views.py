from django.http import JsonResponse

from apps.core.users.decorators import role_required
from apps.core.users.models import User


@role_required([User.ROLE_ADMIN, User.ROLE_EMPLOYEE, User.ROLE_STUDENT])
def current_user(request):
    user = request.user
    session = request.current_session
    return JsonResponse({
        'username': user.username,
        'role': user.role,
        'student_id': user.student_id,
        'current_session': session.name if session else None,
    })
