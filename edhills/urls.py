from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('apps.core.users.urls')),

    path('school/', include('apps.core.schools.urls')),
    path('sessions/', include('apps.core.academic_sessions.urls')),
    path('students/', include('apps.core.students.urls')),
    path('fees/', include('apps.core.fees.urls')),
    path('expenses/', include('apps.core.expenses.urls')),
    path('trash/', include('apps.core.recycle_bin.urls')),
    path('reports/', include('apps.operations.reports.urls')),
]
