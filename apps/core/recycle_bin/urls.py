from django.urls import path

from .views import trash_delete, trash_list, trash_restore

urlpatterns = [
    path('', trash_list, name='trash_list'),
    path('<str:trash_id>/restore/', trash_restore, name='trash_restore'),
    path('<str:trash_id>/delete/', trash_delete, name='trash_delete'),
]
