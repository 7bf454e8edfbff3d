from apps.core.schools.models import SchoolProfile


class CurrentSessionMiddleware:
    """
    Resolves the session context for every request.
    request.current_session is the profile's current session unless the
    query string names another one (?session=2023-2024).
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        profile = SchoolProfile.load()
        request.school_profile = profile
        request.current_session = profile.current_session

        requested = request.GET.get('session', '').strip()
        if requested:
            from apps.core.academic_sessions.models import AcademicSession

            session = AcademicSession.objects.filter(name=requested).first()
            if session:
                request.current_session = session

        return self.get_response(request)
