from django.urls import path

from .views import expense_create, expense_delete, expense_list, expense_update

urlpatterns = [
    path('', expense_list, name='expense_list'),
    path('add/', expense_create, name='expense_create'),
    path('<str:expense_id>/edit/', expense_update, name='expense_update'),
    path('<str:expense_id>/delete/', expense_delete, name='expense_delete'),
]
