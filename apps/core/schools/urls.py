from django.urls import path

from .views import profile_detail, profile_update

urlpatterns = [
    path('', profile_detail, name='school_profile'),
    path('update/', profile_update, name='school_profile_update'),
]
