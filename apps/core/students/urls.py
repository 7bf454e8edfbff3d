from django.urls import path

from .views import (
    class_create,
    class_delete,
    class_list,
    fee_line_balance_detail,
    student_balance_detail,
    student_create,
    student_delete,
    student_list,
    student_update,
)

urlpatterns = [
    path('', student_list, name='student_list'),
    path('add/', student_create, name='student_create'),

    path('classes/', class_list, name='class_list'),
    path('classes/add/', class_create, name='class_create'),
    path('classes/<str:name>/delete/', class_delete, name='class_delete'),

    path('<str:student_id>/edit/', student_update, name='student_update'),
    path('<str:student_id>/delete/', student_delete, name='student_delete'),
    path('<str:student_id>/balance/', student_balance_detail, name='student_balance'),
    path('<str:student_id>/fees/<str:fee_id>/balance/', fee_line_balance_detail, name='fee_line_balance'),
]
